"""
Router de la feuille d'appel journalière.
Section au format "niveau-section" (ex. 3-A), date au format AAAA-MM-JJ.
"""

import datetime
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from presences.database import get_db
from presences.schemas.attendance import AttendanceStatus, CommitRequest, CommitResult, DayMapResponse, ToggleRequest
from presences.schemas.student import ClassSection
from presences.services import attendance_service
from presences.services.auth_service import SessionContext, can_mark
from presences.session import get_session

router = APIRouter(prefix="/api/v1/attendance", tags=["Présences"])


def resolve_section(section: str, session: SessionContext) -> ClassSection:
    """Valide la section demandée et vérifie que l'utilisateur peut y faire l'appel."""
    try:
        class_section = ClassSection.parse(section)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    if not can_mark(session.account, class_section):
        raise HTTPException(status_code=403, detail="Cette classe ne vous est pas assignée.")
    return class_section


@router.get("/{section}/{day}", response_model=DayMapResponse, summary="Feuille d'appel du jour")
def get_day_sheet(
    section: str,
    day: datetime.date,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    """Statuts enregistrés ce jour ; les élèves non marqués n'apparaissent pas dans `marks`."""
    return attendance_service.get_day_sheet(db, resolve_section(section, session), day)


@router.post("/toggle", response_model=Dict[str, AttendanceStatus], summary="Basculer un statut")
def toggle_status(data: ToggleRequest, session: SessionContext = Depends(get_session)):
    """Attribue le statut, ou efface la marque si l'élève avait déjà ce statut. Rien n'est enregistré."""
    return attendance_service.toggle_status(data.marks, data.student_id, data.status)


@router.post("/{section}/{day}", response_model=CommitResult, summary="Enregistrer la feuille d'appel")
def commit_day_sheet(
    section: str,
    day: datetime.date,
    data: CommitRequest,
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    """
    Enregistre les statuts de la feuille (une présence par élève et par jour, écrasée si existante).

    Élèves non marqués : laissés vides si `leave_unset`, sinon `default_unmarked_to`
    de la requête, sinon DEFAULT_UNMARKED_TO de la configuration, sinon laissés sans statut.
    """
    class_section = resolve_section(section, session)
    default = data.unmarked_policy(attendance_service.configured_default())
    return attendance_service.commit(db, class_section, day, data.marks, default_unmarked_to=default)
