"""
Dépendances FastAPI du contexte de session.
Le client renvoie l'ID du compte connecté dans l'en-tête X-Staff-Id après /auth/login.
"""

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from presences.database import get_db
from presences.exceptions import AuthenticationError
from presences.services.auth_service import SessionContext, load_session


def get_session(
    x_staff_id: str = Header(..., alias="X-Staff-Id"),
    db: Session = Depends(get_db),
) -> SessionContext:
    try:
        return load_session(db, x_staff_id)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))


def require_admin(session: SessionContext = Depends(get_session)) -> SessionContext:
    if not session.is_admin:
        raise HTTPException(status_code=403, detail="Réservé aux administrateurs.")
    return session
