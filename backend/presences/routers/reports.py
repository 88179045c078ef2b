"""
Router des rapports : journalier, matrice mensuelle, élèves à risque et exports CSV.
"""

import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import PlainTextResponse
from sqlalchemy.orm import Session

from presences.config import settings
from presences.database import get_db
from presences.routers.attendance import resolve_section
from presences.schemas.report import CriticalStudent, MonthlyMatrix, SectionSummary
from presences.services import export_service, record_store, report_service, risk_service
from presences.services.auth_service import SessionContext
from presences.services.record_store import Collection
from presences.session import get_session, require_admin

router = APIRouter(prefix="/api/v1/reports", tags=["Rapports"])


def _csv_response(content: str, filename: str) -> PlainTextResponse:
    return PlainTextResponse(
        content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _matrix(db: Session, section: str, month: str, session: SessionContext) -> MonthlyMatrix:
    class_section = resolve_section(section, session)
    try:
        year, month_num = report_service.parse_year_month(month)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return report_service.monthly_matrix(db, class_section, year, month_num)


@router.get("/sections", response_model=List[str], summary="Classes connues")
def list_sections(db: Session = Depends(get_db), session: SessionContext = Depends(get_session)):
    """Classes distinctes de l'effectif, triées (ex. ["1-A", "3-B"])."""
    students = record_store.get_all(db, Collection.STUDENTS)
    return [s.key for s in report_service.list_sections(students)]


@router.get("/daily", response_model=List[SectionSummary], summary="Rapport journalier")
def daily_summary(
    day: Optional[datetime.date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_admin),
):
    """Une ligne par classe pour la date donnée (aujourd'hui par défaut)."""
    return report_service.daily_summary(db, day or datetime.date.today())


@router.get("/daily/csv", summary="Export CSV du rapport journalier")
def daily_summary_csv(
    day: Optional[datetime.date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_admin),
):
    day = day or datetime.date.today()
    content = export_service.daily_summary_csv(report_service.daily_summary(db, day))
    return _csv_response(content, f"rapport_journalier_{day.isoformat()}.csv")


@router.get("/monthly/{section}", response_model=MonthlyMatrix, summary="Matrice mensuelle d'une classe")
def monthly_matrix(
    section: str,
    month: str = Query(..., description="Mois au format AAAA-MM"),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    return _matrix(db, section, month, session)


@router.get("/monthly/{section}/csv", summary="Export CSV de la matrice mensuelle")
def monthly_matrix_csv(
    section: str,
    month: str = Query(..., description="Mois au format AAAA-MM"),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    matrix = _matrix(db, section, month, session)
    return _csv_response(export_service.monthly_matrix_csv(matrix), f"matrice_{section}_{month}.csv")


@router.get("/critical", response_model=List[CriticalStudent], summary="Élèves à risque")
def critical_students(
    threshold: Optional[int] = Query(None, ge=1),
    limit: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    session: SessionContext = Depends(require_admin),
):
    """Élèves dont les absences non justifiées atteignent le seuil (RISK_THRESHOLD par défaut)."""
    return risk_service.critical_students(
        db,
        threshold=threshold if threshold is not None else settings.RISK_THRESHOLD,
        limit=limit,
    )
