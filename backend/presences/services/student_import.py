"""
Service d'import CSV pour les élèves.

Format du modèle : une ligne d'en-tête puis des colonnes positionnelles
nom ; identifiant scolaire ; sexe ; niveau ; section.

Les valeurs manquantes sont remplacées plutôt que rejetées (nom → SANS NOM,
sexe → M, niveau → 1, section → A). Seules les lignes sans identifiant scolaire
sont rejetées : c'est la clé de fusion avec l'effectif existant.
"""

import csv
import io
from typing import List

from sqlalchemy.orm import Session

from presences.schemas.student import ImportError, Sex, Shift, Student, StudentImportReport
from presences.services import student_service

PLACEHOLDER_NAME = "SANS NOM"
TEMPLATE_HEADER = ["nom", "cedule", "sexe", "niveau", "section"]


def _detect_separator(sample: str) -> str:
    """Détecte le séparateur CSV (virgule ou point-virgule)."""
    if sample.count(";") >= sample.count(","):
        return ";"
    return ","


def _cell(row: List[str], index: int) -> str:
    return row[index].strip() if index < len(row) else ""


def parse_students_csv(content: bytes) -> tuple[List[Student], List[ImportError], int]:
    """
    Parse le CSV et retourne (élèves valides, erreurs, nombre de lignes non vides).
    Lève ValueError si le fichier n'est pas encodé en UTF-8.
    """
    try:
        text = content.decode("utf-8-sig")  # utf-8-sig gère le BOM Excel
    except UnicodeDecodeError:
        raise ValueError("Encodage invalide : le fichier CSV doit être enregistré en UTF-8.")
    lines = text.splitlines()
    if not lines:
        return [], [], 0

    separator = _detect_separator(lines[0])
    reader = csv.reader(io.StringIO(text), delimiter=separator)
    next(reader, None)  # ligne 1 = en-tête du modèle

    students: List[Student] = []
    errors: List[ImportError] = []
    total_rows = 0

    for row_num, row in enumerate(reader, start=2):
        if not any(cell.strip() for cell in row):
            continue
        total_rows += 1

        school_id = _cell(row, 1)
        if not school_id:
            errors.append(ImportError(
                row=row_num,
                content=separator.join(row),
                reason="Identifiant scolaire manquant",
            ))
            continue

        students.append(Student(
            id=student_service.new_student_id(),
            full_name=_cell(row, 0).upper() or PLACEHOLDER_NAME,
            school_id=school_id,
            sex=Sex.FEMALE if _cell(row, 2).upper() == "F" else Sex.MALE,
            grade=_cell(row, 3) or "1",
            section=_cell(row, 4) or "A",
            shift=Shift.MORNING,
        ))

    return students, errors, total_rows


def parse_and_import_csv(content: bytes, db: Session) -> StudentImportReport:
    """Parse le CSV puis fusionne les élèves valides dans l'effectif."""
    students, errors, total_rows = parse_students_csv(content)

    inserted = updated = 0
    if students:
        inserted, updated = student_service.import_students(db, students)

    return StudentImportReport(
        total_rows=total_rows,
        inserted=inserted,
        updated=updated,
        rejected=len(errors),
        errors=errors,
    )


def template_csv() -> str:
    """Modèle CSV vide proposé au téléchargement."""
    return ";".join(TEMPLATE_HEADER) + "\n"
