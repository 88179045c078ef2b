"""
Service métier pour la gestion du personnel.
"""

import logging
import uuid
from typing import List

from sqlalchemy.orm import Session

from presences.exceptions import ForbiddenActionError
from presences.schemas.staff import Role, StaffAccount, StaffCreate, StaffResponse, StaffUpdate
from presences.services import record_store
from presences.services.auth_service import can_modify, is_protected
from presences.services.record_store import Collection

logger = logging.getLogger(__name__)


def to_response(account: StaffAccount) -> StaffResponse:
    return StaffResponse(
        id=account.id,
        first_name=account.first_name,
        last_name=account.last_name,
        username=account.username,
        role=account.role,
        grade=account.grade,
        section=account.section,
        active=account.active,
        protected=is_protected(account),
    )


def list_staff(db: Session) -> List[StaffResponse]:
    """Retourne tous les comptes dans l'ordre de la collection."""
    return [to_response(u) for u in record_store.get_all(db, Collection.USERS)]


def _get(db: Session, staff_id: str) -> StaffAccount:
    account = next((u for u in record_store.get_all(db, Collection.USERS) if u.id == staff_id), None)
    if account is None:
        raise ValueError("Compte introuvable.")
    return account


def _check_username_free(db: Session, username: str, own_id: str = "") -> None:
    taken = any(
        u.username == username and u.id != own_id
        for u in record_store.get_all(db, Collection.USERS)
    )
    if taken:
        raise ValueError(f"L'identifiant '{username}' est déjà utilisé.")


def create_staff(db: Session, actor: StaffAccount, data: StaffCreate) -> StaffResponse:
    """
    Crée un compte. Seuls les administrateurs créent des comptes ;
    seul l'administrateur protégé peut créer d'autres administrateurs.
    Lève ValueError si l'identifiant de connexion est déjà pris.
    """
    if not actor.is_admin:
        raise ForbiddenActionError("Seul un administrateur peut créer un compte.")
    if data.role == Role.ADMIN and not is_protected(actor):
        raise ForbiddenActionError("Seul l'administrateur principal peut créer un administrateur.")

    _check_username_free(db, data.username)

    account = StaffAccount(id=f"u-{uuid.uuid4().hex}", **data.model_dump())
    if account.role == Role.ADMIN:
        account = account.model_copy(update={"grade": None, "section": None})

    record_store.upsert(db, Collection.USERS, account)
    logger.info("Compte créé : %s (%s)", account.username, account.role.value)
    return to_response(account)


def update_staff(db: Session, actor: StaffAccount, staff_id: str, data: StaffUpdate) -> StaffResponse:
    """
    Met à jour les champs fournis d'un compte.
    Seul l'administrateur protégé change les rôles ; le compte protégé reste administrateur.
    """
    target = _get(db, staff_id)
    if not can_modify(actor, target):
        raise ForbiddenActionError("Vous ne pouvez pas modifier ce compte.")

    update_data = data.model_dump(exclude_unset=True)

    # Un enseignant ne modifie que son profil : ni rôle ni classe assignée
    if not actor.is_admin:
        for field in ("role", "grade", "section"):
            if field in update_data and update_data[field] != getattr(target, field):
                raise ForbiddenActionError("Seul un administrateur peut modifier le rôle ou la classe assignée.")

    new_role = update_data.get("role")
    if new_role is not None and new_role != target.role:
        if is_protected(target):
            raise ForbiddenActionError("Le rôle de l'administrateur principal ne peut pas être modifié.")
        if not is_protected(actor):
            raise ForbiddenActionError("Seul l'administrateur principal peut changer un rôle.")

    if "username" in update_data:
        _check_username_free(db, update_data["username"], own_id=target.id)

    updated = target.model_copy(update=update_data)
    if updated.role == Role.ADMIN:
        updated = updated.model_copy(update={"grade": None, "section": None})
    elif not (updated.grade and updated.section):
        raise ValueError("Un enseignant doit avoir un niveau et une section assignés.")

    record_store.upsert(db, Collection.USERS, updated)
    return to_response(updated)


def toggle_active(db: Session, actor: StaffAccount, staff_id: str) -> StaffResponse:
    """Suspend ou réactive un compte. Le compte protégé ne peut jamais être suspendu."""
    target = _get(db, staff_id)
    if is_protected(target):
        raise ForbiddenActionError("L'administrateur principal ne peut pas être suspendu.")
    if not actor.is_admin or not can_modify(actor, target):
        raise ForbiddenActionError("Vous ne pouvez pas suspendre ce compte.")

    updated = target.model_copy(update={"active": not target.active})
    record_store.upsert(db, Collection.USERS, updated)
    logger.info("Compte %s : %s", updated.username, "réactivé" if updated.active else "suspendu")
    return to_response(updated)


def delete_staff(db: Session, actor: StaffAccount, staff_id: str) -> bool:
    """
    Supprime définitivement un compte (administrateur protégé uniquement).
    Retourne False si le compte n'existe pas.
    """
    if not is_protected(actor):
        raise ForbiddenActionError("Seul l'administrateur principal peut supprimer un compte.")
    if staff_id == actor.id:
        raise ForbiddenActionError("L'administrateur principal ne peut pas être supprimé.")
    return record_store.delete(db, Collection.USERS, staff_id)
