"""
Router pour la gestion du personnel (administrateurs et enseignants).
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from presences.database import get_db
from presences.exceptions import ForbiddenActionError
from presences.schemas.staff import StaffCreate, StaffResponse, StaffUpdate
from presences.services import staff_service
from presences.services.auth_service import SessionContext
from presences.session import get_session, require_admin

router = APIRouter(prefix="/api/v1/staff", tags=["Personnel"])


@router.get("", response_model=List[StaffResponse], summary="Lister le personnel")
def list_staff(db: Session = Depends(get_db), session: SessionContext = Depends(require_admin)):
    return staff_service.list_staff(db)


@router.post("", response_model=StaffResponse, status_code=201, summary="Créer un compte")
def create_staff(data: StaffCreate, db: Session = Depends(get_db), session: SessionContext = Depends(get_session)):
    try:
        return staff_service.create_staff(db, session.account, data)
    except ForbiddenActionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.put("/{staff_id}", response_model=StaffResponse, summary="Modifier un compte")
def update_staff(
    staff_id: str,
    data: StaffUpdate,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    """Met à jour les champs fournis. Le compte administrateur principal garde son rôle."""
    try:
        return staff_service.update_staff(db, session.account, staff_id, data)
    except ForbiddenActionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        status = 404 if "introuvable" in str(e) else 409
        raise HTTPException(status_code=status, detail=str(e))


@router.post("/{staff_id}/toggle-active", response_model=StaffResponse, summary="Suspendre / réactiver")
def toggle_active(staff_id: str, db: Session = Depends(get_db), session: SessionContext = Depends(require_admin)):
    try:
        return staff_service.toggle_active(db, session.account, staff_id)
    except ForbiddenActionError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))


@router.delete("/{staff_id}", status_code=204, summary="Supprimer un compte")
def delete_staff(staff_id: str, db: Session = Depends(get_db), session: SessionContext = Depends(require_admin)):
    """Suppression définitive. Sans effet si le compte n'existe pas."""
    try:
        staff_service.delete_staff(db, session.account, staff_id)
    except ForbiddenActionError as e:
        raise HTTPException(status_code=403, detail=str(e))
