"""
Router des tableaux de bord.
"""

import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from presences.database import get_db
from presences.schemas.report import AdminOverview, TeacherOverview
from presences.services import dashboard_service
from presences.services.auth_service import SessionContext
from presences.session import get_session, require_admin

router = APIRouter(prefix="/api/v1/dashboard", tags=["Tableaux de bord"])


@router.get("/admin", response_model=AdminOverview, summary="Tableau de bord administration")
def admin_overview(
    day: Optional[datetime.date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_admin),
):
    return dashboard_service.admin_overview(db, day or datetime.date.today())


@router.get("/teacher", response_model=TeacherOverview, summary="Tableau de bord enseignant")
def teacher_overview(
    day: Optional[datetime.date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    """Présents du jour dans la classe assignée à l'utilisateur connecté."""
    return dashboard_service.teacher_overview(db, session.account, day or datetime.date.today())
