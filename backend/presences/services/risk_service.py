"""
Détection des élèves à risque de décrochage.

Seules les absences non justifiées comptent ; les absences justifiées n'entrent jamais
dans le calcul. Classement par nombre d'absences décroissant, puis par nom et ID
pour un ordre reproductible.
"""

from collections import Counter
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from presences.schemas.attendance import AttendanceEvent, AttendanceStatus
from presences.schemas.report import CriticalStudent
from presences.schemas.student import Student
from presences.services import record_store
from presences.services.record_store import Collection


def rank_critical(
    students: Iterable[Student],
    events: Iterable[AttendanceEvent],
    threshold: int = 3,
    limit: Optional[int] = None,
) -> List[CriticalStudent]:
    """Élèves dont le nombre d'absences non justifiées atteint le seuil, classés."""
    absences = Counter(e.student_id for e in events if e.status == AttendanceStatus.ABSENT)

    ranked = sorted(
        (
            CriticalStudent(student=s, unexcused_absences=absences[s.id])
            for s in students
            if absences[s.id] >= threshold
        ),
        key=lambda c: (-c.unexcused_absences, c.student.full_name, c.student.id),
    )
    return ranked[:limit] if limit is not None else ranked


def critical_students(db: Session, threshold: int = 3, limit: Optional[int] = None) -> List[CriticalStudent]:
    """Parcourt tout le journal. Les présences d'élèves supprimés sont ignorées."""
    return rank_critical(
        record_store.get_all(db, Collection.STUDENTS),
        record_store.get_all(db, Collection.ATTENDANCE),
        threshold=threshold,
        limit=limit,
    )
