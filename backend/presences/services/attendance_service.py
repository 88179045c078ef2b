"""
Service de la feuille d'appel journalière.

Fait le lien entre la vue d'un jour pour une classe et le journal des présences :
- lecture de la feuille du jour (élèves non marqués absents du dictionnaire)
- bascule d'un statut (re-cliquer le même statut efface la marque)
- enregistrement idempotent : une seule présence par (élève, jour), écrasée si elle existe
"""

import datetime
import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from presences.config import settings
from presences.schemas.attendance import AttendanceEvent, AttendanceStatus, CommitResult, DayMapResponse
from presences.schemas.student import ClassSection, Student
from presences.services import record_store
from presences.services.record_store import Collection

logger = logging.getLogger(__name__)

DayMap = Dict[str, AttendanceStatus]


def attendance_key(event: AttendanceEvent):
    """Clé d'unicité d'une présence."""
    return (event.student_id, event.date)


def configured_default() -> Optional[AttendanceStatus]:
    """Statut par défaut des élèves non marqués défini en configuration (None = laisser vide)."""
    if not settings.DEFAULT_UNMARKED_TO:
        return None
    return AttendanceStatus(settings.DEFAULT_UNMARKED_TO)


def section_roster(students: List[Student], section: ClassSection) -> List[Student]:
    """Élèves de la classe, triés par nom complet."""
    return sorted(
        (s for s in students if s.belongs_to(section)),
        key=lambda s: (s.full_name, s.id),
    )


def load_day_map(db: Session, section: ClassSection, day: datetime.date) -> DayMap:
    """
    Retourne les statuts enregistrés ce jour-là pour les élèves de la classe.
    Un élève sans présence ce jour n'apparaît pas (aucun statut par défaut).
    """
    roster_ids = {s.id for s in record_store.get_all(db, Collection.STUDENTS) if s.belongs_to(section)}
    return {
        event.student_id: event.status
        for event in record_store.get_all(db, Collection.ATTENDANCE)
        if event.date == day and event.student_id in roster_ids
    }


def get_day_sheet(db: Session, section: ClassSection, day: datetime.date) -> DayMapResponse:
    """Feuille du jour avec les compteurs inscrits / marqués."""
    roster = section_roster(record_store.get_all(db, Collection.STUDENTS), section)
    marks = load_day_map(db, section, day)
    return DayMapResponse(
        section=section.key,
        date=day,
        enrolled=len(roster),
        marked=len(marks),
        marks=marks,
    )


def toggle_status(marks: DayMap, student_id: str, status: AttendanceStatus) -> DayMap:
    """
    Retourne une nouvelle feuille : si l'élève a déjà ce statut, sa marque est effacée,
    sinon le statut lui est attribué. La feuille reçue n'est pas modifiée.
    """
    updated = dict(marks)
    if updated.get(student_id) == status:
        del updated[student_id]
    else:
        updated[student_id] = status
    return updated


def commit(
    db: Session,
    section: ClassSection,
    day: datetime.date,
    marks: DayMap,
    default_unmarked_to: Optional[AttendanceStatus] = None,
) -> CommitResult:
    """
    Enregistre la feuille d'un jour pour une classe.

    - Chaque élève marqué : présence (élève, jour) créée ou écrasée
    - Élève non marqué : complété par default_unmarked_to si fourni,
      sinon sa présence éventuelle reste inchangée
    - Identifiants hors de la classe : ignorés et signalés dans le rapport

    Enregistrer deux fois la même feuille produit le même état.
    """
    roster = section_roster(record_store.get_all(db, Collection.STUDENTS), section)
    roster_ids = {s.id for s in roster}

    ignored = sorted(sid for sid in marks if sid not in roster_ids)
    if ignored:
        logger.warning(
            "Feuille %s du %s : %d identifiant(s) hors classe ignoré(s)",
            section.key, day, len(ignored),
        )

    events: List[AttendanceEvent] = []
    written = 0
    defaulted = 0
    unmarked = 0

    for student in roster:
        status = marks.get(student.id)
        if status is not None:
            written += 1
        elif default_unmarked_to is not None:
            status = default_unmarked_to
            defaulted += 1
        else:
            unmarked += 1
            continue
        events.append(AttendanceEvent.build(student.id, day, status))

    if events:
        record_store.bulk_merge(db, Collection.ATTENDANCE, events, attendance_key)

    logger.info(
        "Feuille %s du %s enregistrée : %d marqués, %d par défaut, %d non marqués",
        section.key, day, written, defaulted, unmarked,
    )

    return CommitResult(
        section=section.key,
        date=day,
        written=written,
        defaulted=defaulted,
        unmarked=unmarked,
        ignored=ignored,
    )
