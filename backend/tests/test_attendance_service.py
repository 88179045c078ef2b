"""
Tests unitaires de la feuille d'appel : lecture du jour, bascule, enregistrement idempotent.
"""

from datetime import date

import pytest

from presences.schemas.attendance import AttendanceEvent, AttendanceStatus
from presences.schemas.student import ClassSection, Student
from presences.services import attendance_service, record_store
from presences.services.record_store import Collection

A = AttendanceStatus.PRESENT
I = AttendanceStatus.ABSENT
IJ = AttendanceStatus.EXCUSED_ABSENT

SECTION_3A = ClassSection(grade="3", section="A")
DAY = date(2024, 3, 1)


# --- Helpers ---

def add_student(db, id, full_name, grade="3", section="A") -> Student:
    student = Student(id=id, full_name=full_name, school_id=f"CE-{id}", grade=grade, section=section)
    return record_store.upsert(db, Collection.STUDENTS, student)


def triples(db):
    return sorted(
        (e.student_id, e.date, e.status.value)
        for e in record_store.get_all(db, Collection.ATTENDANCE)
    )


@pytest.fixture
def roster(db):
    """S1 et S2 en 3-A, S3 en 3-B."""
    add_student(db, "S1", "BERNARD ALICE")
    add_student(db, "S2", "ANDRE PAUL")
    add_student(db, "S3", "COLIN EMMA", section="B")
    return db


# ============================================================
# Lecture du jour
# ============================================================

def test_load_day_map_vide(roster):
    """Aucune présence ce jour → dictionnaire vide, pas de statut par défaut."""
    assert attendance_service.load_day_map(roster, SECTION_3A, DAY) == {}


def test_load_day_map_filtre_date_et_classe(roster):
    attendance_service.commit(roster, SECTION_3A, DAY, {"S1": A})
    attendance_service.commit(roster, SECTION_3A, date(2024, 3, 4), {"S2": I})
    attendance_service.commit(roster, ClassSection(grade="3", section="B"), DAY, {"S3": A})

    assert attendance_service.load_day_map(roster, SECTION_3A, DAY) == {"S1": A}


def test_get_day_sheet_compteurs(roster):
    attendance_service.commit(roster, SECTION_3A, DAY, {"S1": IJ})

    sheet = attendance_service.get_day_sheet(roster, SECTION_3A, DAY)

    assert sheet.section == "3-A"
    assert sheet.enrolled == 2
    assert sheet.marked == 1
    assert sheet.marks == {"S1": IJ}


def test_section_roster_trie_par_nom(roster):
    students = record_store.get_all(roster, Collection.STUDENTS)
    assert [s.id for s in attendance_service.section_roster(students, SECTION_3A)] == ["S2", "S1"]


# ============================================================
# Bascule
# ============================================================

def test_toggle_attribue_statut():
    assert attendance_service.toggle_status({}, "S1", A) == {"S1": A}


def test_toggle_meme_statut_efface():
    """Re-cliquer le même statut efface la marque."""
    assert attendance_service.toggle_status({"S1": A}, "S1", A) == {}


def test_toggle_autre_statut_remplace():
    assert attendance_service.toggle_status({"S1": A}, "S1", I) == {"S1": I}


def test_toggle_ne_modifie_pas_la_feuille_recue():
    marks = {"S1": A}
    attendance_service.toggle_status(marks, "S1", A)
    assert marks == {"S1": A}


@pytest.mark.parametrize("status", list(AttendanceStatus))
@pytest.mark.parametrize("others", [{}, {"S2": A}, {"S2": I, "S3": IJ}])
def test_toggle_deux_fois_revient_a_l_etat_initial(others, status):
    """Élève non marqué ou déjà marqué avec ce statut : deux bascules ramènent la feuille d'origine."""
    for initial in (dict(others), {**others, "S1": status}):
        once = attendance_service.toggle_status(initial, "S1", status)
        assert attendance_service.toggle_status(once, "S1", status) == initial


# ============================================================
# Enregistrement
# ============================================================

def test_commit_ecrit_les_presences(roster):
    result = attendance_service.commit(roster, SECTION_3A, DAY, {"S1": A, "S2": I})

    assert result.written == 2
    assert result.unmarked == 0
    assert triples(roster) == [("S1", DAY, "A"), ("S2", DAY, "I")]


def test_commit_id_composite(roster):
    attendance_service.commit(roster, SECTION_3A, DAY, {"S1": A})

    event = record_store.get_all(roster, Collection.ATTENDANCE)[0]
    assert event.id == "S1_2024-03-01"


def test_commit_idempotent(roster):
    """Enregistrer deux fois la même feuille → même état, sans doublon."""
    marks = {"S1": A, "S2": IJ}
    attendance_service.commit(roster, SECTION_3A, DAY, marks)
    first = triples(roster)

    attendance_service.commit(roster, SECTION_3A, DAY, marks)

    assert triples(roster) == first
    assert len(first) == 2


def test_commit_ecrase_statut_existant(roster):
    """Une seule présence par (élève, jour) après plusieurs enregistrements."""
    attendance_service.commit(roster, SECTION_3A, DAY, {"S1": A})
    attendance_service.commit(roster, SECTION_3A, DAY, {"S1": I})
    attendance_service.commit(roster, SECTION_3A, date(2024, 3, 4), {"S1": A})

    keys = [(e.student_id, e.date) for e in record_store.get_all(roster, Collection.ATTENDANCE)]
    assert len(keys) == len(set(keys))
    assert ("S1", DAY, "I") in triples(roster)


def test_commit_non_marque_laisse_l_existant(roster):
    """Élève absent de la feuille → sa présence précédente reste inchangée."""
    attendance_service.commit(roster, SECTION_3A, DAY, {"S1": A, "S2": I})

    result = attendance_service.commit(roster, SECTION_3A, DAY, {"S1": IJ})

    assert result.unmarked == 1
    assert triples(roster) == [("S1", DAY, "IJ"), ("S2", DAY, "I")]


def test_commit_statut_par_defaut(roster):
    """default_unmarked_to complète les élèves non marqués."""
    result = attendance_service.commit(roster, SECTION_3A, DAY, {"S1": I}, default_unmarked_to=A)

    assert result.written == 1
    assert result.defaulted == 1
    assert triples(roster) == [("S1", DAY, "I"), ("S2", DAY, "A")]


def test_commit_ignore_hors_classe(roster):
    """Identifiants hors de la classe (autre section ou inconnus) → ignorés et signalés."""
    result = attendance_service.commit(roster, SECTION_3A, DAY, {"S1": A, "S3": A, "X9": I})

    assert result.ignored == ["S3", "X9"]
    assert triples(roster) == [("S1", DAY, "A")]


def test_commit_feuille_vide(roster):
    result = attendance_service.commit(roster, SECTION_3A, DAY, {})

    assert result.written == 0
    assert result.unmarked == 2
    assert triples(roster) == []


def test_configured_default(monkeypatch):
    from presences.config import settings

    monkeypatch.setattr(settings, "DEFAULT_UNMARKED_TO", None)
    assert attendance_service.configured_default() is None

    monkeypatch.setattr(settings, "DEFAULT_UNMARKED_TO", "A")
    assert attendance_service.configured_default() == A


def test_attendance_event_build():
    event = AttendanceEvent.build("S1", DAY, IJ)
    assert event.id == "S1_2024-03-01"
    assert event.model_dump(mode="json") == {
        "id": "S1_2024-03-01", "student_id": "S1", "date": "2024-03-01", "status": "IJ",
    }
