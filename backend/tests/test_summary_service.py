"""
Tests unitaires du résumé transmis à l'assistant IA.
"""

from datetime import date

from presences.schemas.attendance import AttendanceEvent, AttendanceStatus
from presences.schemas.student import Student
from presences.services import summary_service

A = AttendanceStatus.PRESENT
I = AttendanceStatus.ABSENT
IJ = AttendanceStatus.EXCUSED_ABSENT


def make_student(id, full_name, grade="3", section="A") -> Student:
    return Student(id=id, full_name=full_name, school_id=f"CE-{id}", grade=grade, section=section)


def event(student_id, day, status) -> AttendanceEvent:
    return AttendanceEvent.build(student_id, date(2024, 3, day), status)


STUDENTS = [
    make_student("S1", "BRUNO", section="B"),
    make_student("S2", "ALICE"),
    make_student("S3", "CLARA"),          # aucune activité
    make_student("S4", "DAVID"),          # absences justifiées uniquement
]

EVENTS = [
    event("S1", 1, A),
    event("S1", 4, I),
    event("S2", 1, A),
    event("S2", 4, IJ),
    event("S4", 1, IJ),
    event("ORPHELIN", 1, I),
]


def test_build_summary():
    summary = summary_service.build_summary(STUDENTS, EVENTS)

    assert [item.model_dump() for item in summary] == [
        {"name": "ALICE", "section": "3° A", "present": 1, "absent": 0, "excused": 1},
        {"name": "BRUNO", "section": "3° B", "present": 1, "absent": 1, "excused": 0},
    ]


def test_eleves_sans_presence_ni_absence_omis():
    """Aucune présence ni absence non justifiée → omis, même avec des absences justifiées."""
    names = [item.name for item in summary_service.build_summary(STUDENTS, EVENTS)]

    assert "CLARA" not in names
    assert "DAVID" not in names


def test_serialisation_stable():
    """Même journal, dans un ordre différent → même résumé sérialisé."""
    first = summary_service.serialize_summary(summary_service.build_summary(STUDENTS, EVENTS))
    second = summary_service.serialize_summary(
        summary_service.build_summary(list(reversed(STUDENTS)), list(reversed(EVENTS)))
    )

    assert first == second
    assert first == (
        '[{"name":"ALICE","section":"3° A","present":1,"absent":0,"excused":1},'
        '{"name":"BRUNO","section":"3° B","present":1,"absent":1,"excused":0}]'
    )


def test_summary_vide():
    assert summary_service.serialize_summary(summary_service.build_summary([], [])) == "[]"
