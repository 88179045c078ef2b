"""
Magasin des collections persistées : users, students, attendance.

Chaque collection est un document JSON unique (une ligne de la table collections).
Toute écriture relit la collection entière, la modifie en mémoire puis la réécrit
dans une seule transaction : aucune écriture partielle n'est observable.

Un document illisible lève CorruptStateError ; il n'est jamais réinitialisé en silence.
"""

import json
import logging
from enum import Enum
from typing import Callable, Hashable, List, Optional, Sequence, Tuple, TypeVar

from pydantic import BaseModel, ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from presences.config import settings
from presences.exceptions import CorruptStateError
from presences.models.collection import StoredCollection
from presences.schemas.attendance import AttendanceEvent
from presences.schemas.staff import Role, StaffAccount
from presences.schemas.student import Student

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class Collection(str, Enum):
    USERS = "users"
    STUDENTS = "students"
    ATTENDANCE = "attendance"


ENTITY_TYPES = {
    Collection.USERS: StaffAccount,
    Collection.STUDENTS: Student,
    Collection.ATTENDANCE: AttendanceEvent,
}


def by_id(entity) -> Hashable:
    return entity.id


def seed_admin() -> StaffAccount:
    """Compte administrateur créé au premier démarrage (compte protégé)."""
    return StaffAccount(
        id=settings.SEED_ADMIN_ID,
        first_name="Admin",
        last_name="Principal",
        username=settings.SEED_ADMIN_USERNAME,
        password=settings.SEED_ADMIN_PASSWORD,
        role=Role.ADMIN,
        active=True,
    )


def initialize(db: Session) -> None:
    """
    Crée les collections absentes : users avec le seul compte administrateur initial,
    students et attendance vides. Les collections existantes ne sont pas touchées.
    """
    existing = set(db.execute(select(StoredCollection.name)).scalars().all())
    created = []

    for collection in Collection:
        if collection.value in existing:
            continue
        initial = [seed_admin()] if collection is Collection.USERS else []
        db.add(StoredCollection(name=collection.value, payload=_dump(initial)))
        created.append(collection.value)

    if created:
        db.commit()
        logger.info("Collections initialisées : %s", ", ".join(created))


def get_all(db: Session, collection: Collection) -> list:
    """Retourne toutes les entités de la collection, ou une liste vide si elle n'existe pas."""
    row = db.get(StoredCollection, collection.value)
    if row is None:
        return []
    return _load(collection, row.payload)


def upsert(
    db: Session,
    collection: Collection,
    entity: T,
    key_fn: Callable[[T], Hashable] = by_id,
) -> T:
    """
    Remplace l'entité de même clé en conservant sa position, ou l'ajoute en fin de collection.
    """
    entities = get_all(db, collection)
    key = key_fn(entity)

    for index, existing in enumerate(entities):
        if key_fn(existing) == key:
            entities[index] = entity
            break
    else:
        entities.append(entity)

    _write(db, collection, entities)
    return entity


def delete(db: Session, collection: Collection, entity_id: str) -> bool:
    """Supprime la première entité portant cet ID. Retourne False (sans erreur) si absente."""
    entities = get_all(db, collection)

    for index, existing in enumerate(entities):
        if existing.id == entity_id:
            del entities[index]
            _write(db, collection, entities)
            return True

    return False


def bulk_merge(
    db: Session,
    collection: Collection,
    incoming: Sequence[T],
    merge_key_fn: Callable[[T], Hashable],
    merge_fn: Optional[Callable[[T, T], T]] = None,
) -> Tuple[int, int]:
    """
    Fusionne un lot d'entités par une clé métier (distincte de l'ID) en une seule écriture.

    - Clé connue : l'entité existante est remplacée sur place (merge_fn(existante, nouvelle)
      si fourni, sinon la nouvelle telle quelle)
    - Clé inconnue : l'entité est ajoutée en fin de collection
    - Deux entités du lot avec la même clé : la dernière l'emporte

    Retourne (insérées, mises à jour).
    """
    entities = get_all(db, collection)

    positions: dict = {}
    for index, existing in enumerate(entities):
        positions.setdefault(merge_key_fn(existing), index)

    inserted = 0
    updated = 0
    for entity in incoming:
        key = merge_key_fn(entity)
        if key in positions:
            index = positions[key]
            entities[index] = merge_fn(entities[index], entity) if merge_fn else entity
            updated += 1
        else:
            positions[key] = len(entities)
            entities.append(entity)
            inserted += 1

    _write(db, collection, entities)
    return inserted, updated


def _load(collection: Collection, payload: str) -> list:
    try:
        raw = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise CorruptStateError(collection.value, f"JSON invalide ({exc.msg})") from exc

    if not isinstance(raw, list):
        raise CorruptStateError(collection.value, "une liste JSON est attendue")

    model = ENTITY_TYPES[collection]
    try:
        return [model.model_validate(item) for item in raw]
    except ValidationError as exc:
        raise CorruptStateError(collection.value, f"entité invalide ({exc.error_count()} erreur(s))") from exc


def _dump(entities: List[BaseModel]) -> str:
    return json.dumps([e.model_dump(mode="json") for e in entities], ensure_ascii=False)


def _write(db: Session, collection: Collection, entities: List[BaseModel]) -> None:
    payload = _dump(entities)
    row = db.get(StoredCollection, collection.value)
    if row is None:
        db.add(StoredCollection(name=collection.value, payload=payload))
    else:
        row.payload = payload

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
