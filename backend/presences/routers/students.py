"""
Router pour les élèves.
Listage, création manuelle, mise à jour, suppression et import CSV.
"""

from typing import List

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from presences.database import get_db
from presences.schemas.student import Student, StudentCreate, StudentImportReport, StudentUpdate
from presences.services import student_service
from presences.services.auth_service import SessionContext
from presences.services.student_import import parse_and_import_csv, template_csv
from presences.session import get_session, require_admin

router = APIRouter(prefix="/api/v1/students", tags=["Élèves"])

ALLOWED_CONTENT_TYPES = {"text/csv", "text/plain", "application/vnd.ms-excel"}
MAX_FILE_SIZE_MB = 5


@router.get("", response_model=List[Student], summary="Lister tous les élèves")
def list_students(db: Session = Depends(get_db), session: SessionContext = Depends(get_session)):
    """Retourne tous les élèves triés par nom complet."""
    return student_service.list_students(db)


@router.post("", response_model=Student, status_code=201, summary="Créer un élève manuellement")
def create_student(data: StudentCreate, db: Session = Depends(get_db), session: SessionContext = Depends(require_admin)):
    return student_service.create_student(db, data)


@router.put("/{student_id}", response_model=Student, summary="Modifier un élève")
def update_student(
    student_id: str,
    data: StudentUpdate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_admin),
):
    """Met à jour les champs fournis d'un élève. Les champs absents ne sont pas modifiés."""
    try:
        return student_service.update_student(db, student_id, data)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{student_id}", status_code=204, summary="Supprimer un élève")
def delete_student(student_id: str, db: Session = Depends(get_db), session: SessionContext = Depends(require_admin)):
    """Supprime un élève. Ses présences sont conservées ; sans effet si l'élève n'existe pas."""
    student_service.delete_student(db, student_id)


@router.get("/template", response_class=PlainTextResponse, summary="Télécharger le modèle CSV")
def download_template(session: SessionContext = Depends(require_admin)):
    return PlainTextResponse(
        template_csv(),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="modele_eleves.csv"'},
    )


@router.post("/upload", response_model=StudentImportReport, summary="Importer des élèves via CSV")
async def upload_students(
    file: UploadFile = File(...),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_admin),
):
    """
    Importe une liste d'élèves depuis un fichier CSV.

    Format attendu du CSV :
    - Ligne d'en-tête ignorée, puis colonnes : `nom`, `cedule`, `sexe`, `niveau`, `section`
    - Séparateur : virgule (`,`) ou point-virgule (`;`)
    - Encodage : UTF-8 (avec ou sans BOM)

    Un identifiant scolaire déjà connu met à jour l'élève existant au lieu d'en créer un nouveau.
    """
    if file.content_type not in ALLOWED_CONTENT_TYPES and not (file.filename or "").endswith(".csv"):
        raise HTTPException(
            status_code=400,
            detail="Format invalide. Seuls les fichiers CSV sont acceptés."
        )

    content = await file.read()

    if len(content) > MAX_FILE_SIZE_MB * 1024 * 1024:
        raise HTTPException(
            status_code=400,
            detail=f"Fichier trop volumineux. Taille maximale : {MAX_FILE_SIZE_MB} Mo."
        )

    if not content:
        raise HTTPException(status_code=400, detail="Le fichier CSV est vide.")

    try:
        return parse_and_import_csv(content, db)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
