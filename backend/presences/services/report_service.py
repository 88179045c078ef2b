"""
Service des rapports de présence.

Deux vues en lecture seule sur le journal :
- rapport journalier : une ligne par classe (inscrits, présents, absents, justifiés, taux)
- matrice mensuelle : une ligne par élève, une colonne par jour du mois, avec totaux
"""

import calendar
import datetime
import logging
from collections import Counter, defaultdict
from typing import Dict, Iterable, List, Tuple

from sqlalchemy.orm import Session

from presences.schemas.attendance import AttendanceStatus
from presences.schemas.report import MonthDay, MonthlyMatrix, SectionSummary, StatusTotals
from presences.schemas.student import ClassSection, Student
from presences.services import record_store
from presences.services.attendance_service import section_roster
from presences.services.record_store import Collection

logger = logging.getLogger(__name__)

# Initiales des jours, indexées par date.weekday() (lundi = 0)
WEEKDAY_LABELS = ("L", "M", "M", "J", "V", "S", "D")
WEEKEND_DAYS = {5, 6}


def achievement_rate(part: int, whole: int) -> int:
    """Pourcentage entier arrondi au plus proche (0,5 vers le haut) ; 0 si whole vaut 0."""
    if whole <= 0:
        return 0
    # round(part / whole * 100) en arithmétique entière, sans arrondi bancaire
    return (200 * part + whole) // (2 * whole)


def tally(statuses: Iterable[AttendanceStatus]) -> StatusTotals:
    """Compte les statuts d'une série de présences."""
    counts = Counter(statuses)
    return StatusTotals(
        present=counts[AttendanceStatus.PRESENT],
        absent=counts[AttendanceStatus.ABSENT],
        excused=counts[AttendanceStatus.EXCUSED_ABSENT],
    )


def list_sections(students: Iterable[Student]) -> List[ClassSection]:
    """Classes distinctes présentes dans l'effectif, triées par leur forme texte."""
    return sorted({s.class_section for s in students}, key=lambda c: c.key)


def daily_summary(db: Session, day: datetime.date) -> List[SectionSummary]:
    """
    Rapport journalier de toutes les classes.
    Les présences d'élèves supprimés (orphelines) ne sont comptées nulle part.
    """
    students = record_store.get_all(db, Collection.STUDENTS)
    section_of = {s.id: s.class_section for s in students}
    enrollment = Counter(s.class_section for s in students)

    statuses_by_section: Dict[ClassSection, List[AttendanceStatus]] = defaultdict(list)
    for event in record_store.get_all(db, Collection.ATTENDANCE):
        if event.date != day or event.student_id not in section_of:
            continue
        statuses_by_section[section_of[event.student_id]].append(event.status)

    summaries = []
    for section in list_sections(students):
        totals = tally(statuses_by_section[section])
        enrolled = enrollment[section]
        summaries.append(SectionSummary(
            section=section.key,
            label=section.label,
            enrollment=enrolled,
            present=totals.present,
            absent=totals.absent,
            excused=totals.excused,
            achievement_rate=achievement_rate(totals.present, enrolled),
        ))

    return summaries


def parse_year_month(value: str) -> Tuple[int, int]:
    """Convertit "AAAA-MM" en (année, mois). Lève ValueError si le format est invalide."""
    try:
        parsed = datetime.datetime.strptime(value, "%Y-%m")
    except ValueError:
        raise ValueError(f"Mois invalide : '{value}' (format attendu : AAAA-MM)")
    return parsed.year, parsed.month


def month_days(year: int, month: int) -> List[MonthDay]:
    """Tous les jours du mois avec l'initiale du jour et l'indicateur de week-end."""
    days_in_month = calendar.monthrange(year, month)[1]
    days = []
    for day_num in range(1, days_in_month + 1):
        weekday = datetime.date(year, month, day_num).weekday()
        days.append(MonthDay(
            day=day_num,
            label=WEEKDAY_LABELS[weekday],
            is_weekend=weekday in WEEKEND_DAYS,
        ))
    return days


def monthly_matrix(db: Session, section: ClassSection, year: int, month: int) -> MonthlyMatrix:
    """
    Matrice mensuelle d'une classe.

    - students : élèves de la classe triés par nom complet
    - cells[student_id][jour] : statut du jour, absent de la cellule si non marqué
    - totaux par élève et par jour calculés en un seul parcours de la matrice
    """
    students = section_roster(record_store.get_all(db, Collection.STUDENTS), section)
    days = month_days(year, month)

    cells: Dict[str, Dict[int, AttendanceStatus]] = {s.id: {} for s in students}
    for event in record_store.get_all(db, Collection.ATTENDANCE):
        if event.student_id not in cells:
            continue
        if event.date.year == year and event.date.month == month:
            cells[event.student_id][event.date.day] = event.status

    statuses_by_day: Dict[int, List[AttendanceStatus]] = {d.day: [] for d in days}
    student_totals = {}
    for student_id, row in cells.items():
        student_totals[student_id] = tally(row.values())
        for day_num, status in row.items():
            statuses_by_day[day_num].append(status)

    day_totals = {day_num: tally(statuses) for day_num, statuses in statuses_by_day.items()}

    logger.debug(
        "Matrice %s %04d-%02d : %d élèves, %d jours",
        section.key, year, month, len(students), len(days),
    )

    return MonthlyMatrix(
        section=section.key,
        year=year,
        month=month,
        students=students,
        days=days,
        cells=cells,
        student_totals=student_totals,
        day_totals=day_totals,
    )
