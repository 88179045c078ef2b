"""
Résumé compact de l'effectif et du journal, transmis à l'assistant IA.

Par élève : nom, classe, présences, absences non justifiées, absences justifiées.
Les élèves sans aucune présence ni absence enregistrée sont omis.
Le résultat est déterministe : même journal ⇒ même résumé sérialisé.
"""

import json
from collections import defaultdict
from typing import Dict, Iterable, List

from sqlalchemy.orm import Session

from presences.schemas.attendance import AttendanceEvent, AttendanceStatus
from presences.schemas.report import StudentActivity
from presences.schemas.student import Student
from presences.services import record_store
from presences.services.record_store import Collection
from presences.services.report_service import tally


def build_summary(students: Iterable[Student], events: Iterable[AttendanceEvent]) -> List[StudentActivity]:
    """Résumé trié par classe puis par nom."""
    statuses: Dict[str, List[AttendanceStatus]] = defaultdict(list)
    for event in events:
        statuses[event.student_id].append(event.status)

    summary = []
    for student in sorted(students, key=lambda s: (s.class_section.key, s.full_name, s.id)):
        totals = tally(statuses.get(student.id, []))
        if totals.present == 0 and totals.absent == 0:
            continue
        summary.append(StudentActivity(
            name=student.full_name,
            section=student.class_section.label,
            present=totals.present,
            absent=totals.absent,
            excused=totals.excused,
        ))
    return summary


def attendance_summary(db: Session) -> List[StudentActivity]:
    return build_summary(
        record_store.get_all(db, Collection.STUDENTS),
        record_store.get_all(db, Collection.ATTENDANCE),
    )


def serialize_summary(summary: List[StudentActivity]) -> str:
    """JSON compact et stable."""
    return json.dumps(
        [item.model_dump() for item in summary],
        ensure_ascii=False,
        separators=(",", ":"),
    )
