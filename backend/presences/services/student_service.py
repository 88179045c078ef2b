"""
Service métier pour l'effectif des élèves.

La suppression d'un élève ne supprime pas ses présences : elles deviennent orphelines
et sont simplement exclues des vues jointes à l'effectif.
"""

import logging
import uuid
from typing import List, Sequence, Tuple

from sqlalchemy.orm import Session

from presences.schemas.student import Student, StudentCreate, StudentUpdate
from presences.services import record_store
from presences.services.record_store import Collection

logger = logging.getLogger(__name__)


def new_student_id() -> str:
    return f"s-{uuid.uuid4().hex}"


def list_students(db: Session) -> List[Student]:
    """Retourne tous les élèves triés par nom complet."""
    return sorted(record_store.get_all(db, Collection.STUDENTS), key=lambda s: (s.full_name, s.id))


def get_student(db: Session, student_id: str) -> Student:
    student = next((s for s in record_store.get_all(db, Collection.STUDENTS) if s.id == student_id), None)
    if student is None:
        raise ValueError("Élève introuvable.")
    return student


def create_student(db: Session, data: StudentCreate) -> Student:
    student = Student(id=new_student_id(), **data.model_dump())
    return record_store.upsert(db, Collection.STUDENTS, student)


def update_student(db: Session, student_id: str, data: StudentUpdate) -> Student:
    """Met à jour les champs fournis. Lève ValueError si l'élève n'existe pas."""
    student = get_student(db, student_id)
    updated = student.model_copy(update=data.model_dump(exclude_unset=True))
    return record_store.upsert(db, Collection.STUDENTS, updated)


def delete_student(db: Session, student_id: str) -> bool:
    """Supprime un élève ; ses présences sont conservées. Retourne False s'il n'existait pas."""
    deleted = record_store.delete(db, Collection.STUDENTS, student_id)
    if deleted:
        logger.info("Élève %s supprimé (présences conservées)", student_id)
    return deleted


def _keep_existing_id(existing: Student, incoming: Student) -> Student:
    # Les présences déjà enregistrées restent rattachées à l'élève réimporté
    return incoming.model_copy(update={"id": existing.id})


def import_students(db: Session, students: Sequence[Student]) -> Tuple[int, int]:
    """
    Fusionne un lot d'élèves par identifiant scolaire :
    écrase l'élève existant sur place, ajoute sinon. Retourne (insérés, mis à jour).
    """
    inserted, updated = record_store.bulk_merge(
        db,
        Collection.STUDENTS,
        students,
        merge_key_fn=lambda s: s.school_id,
        merge_fn=_keep_existing_id,
    )
    logger.info("Import élèves : %d ajoutés, %d mis à jour", inserted, updated)
    return inserted, updated
