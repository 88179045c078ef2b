"""
Connexion, contexte de session et règles d'autorisation du personnel.

Le compte administrateur initial est protégé : il ne peut être ni supprimé,
ni suspendu, ni perdre son rôle. Toutes les vérifications passent par
is_protected() et can_modify() plutôt que par des comparaisons d'ID dispersées.
"""

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

from presences.config import settings
from presences.exceptions import AuthenticationError
from presences.schemas.staff import StaffAccount
from presences.schemas.student import ClassSection
from presences.services import record_store
from presences.services.record_store import Collection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionContext:
    """Utilisateur connecté, construit à la frontière de l'API et passé explicitement."""
    account: StaffAccount

    @property
    def is_admin(self) -> bool:
        return self.account.is_admin


def login(db: Session, username: str, password: str) -> StaffAccount:
    """
    Vérifie les identifiants (comparaison en clair).
    Lève AuthenticationError si le couple est inconnu ou si le compte est suspendu.
    """
    account = next(
        (
            u for u in record_store.get_all(db, Collection.USERS)
            if u.username == username and u.password == password
        ),
        None,
    )
    if account is None:
        logger.info("Échec de connexion pour '%s'", username)
        raise AuthenticationError("Identifiants incorrects.")
    if not account.active:
        logger.info("Connexion refusée, compte suspendu : '%s'", username)
        raise AuthenticationError("Ce compte est suspendu. Contactez l'administration.")
    return account


def load_session(db: Session, staff_id: str) -> SessionContext:
    """Reconstruit le contexte de session depuis l'ID du compte connecté."""
    account = next((u for u in record_store.get_all(db, Collection.USERS) if u.id == staff_id), None)
    if account is None or not account.active:
        raise AuthenticationError("Session invalide.")
    return SessionContext(account=account)


def is_protected(account: StaffAccount) -> bool:
    """Vrai pour le compte administrateur initial."""
    return account.id == settings.SEED_ADMIN_ID


def can_modify(actor: StaffAccount, target: StaffAccount) -> bool:
    """
    - Administrateur protégé : peut modifier tous les comptes
    - Autre administrateur : les enseignants et lui-même
    - Enseignant : lui-même uniquement
    """
    if is_protected(actor):
        return True
    if actor.id == target.id:
        return True
    return actor.is_admin and not target.is_admin


def can_mark(actor: StaffAccount, section: ClassSection) -> bool:
    """Un administrateur peut faire l'appel partout, un enseignant dans sa classe seulement."""
    if actor.is_admin:
        return True
    return actor.grade == section.grade and actor.section == section.section
