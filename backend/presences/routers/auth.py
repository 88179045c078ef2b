"""
Router d'authentification.
"""

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from presences.database import get_db
from presences.exceptions import AuthenticationError
from presences.schemas.staff import LoginRequest, StaffResponse
from presences.services import auth_service, staff_service

router = APIRouter(prefix="/api/v1/auth", tags=["Authentification"])


@router.post("/login", response_model=StaffResponse, summary="Se connecter")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    """
    Vérifie les identifiants et retourne le compte.
    L'ID retourné doit être renvoyé dans l'en-tête X-Staff-Id des requêtes suivantes.
    """
    try:
        account = auth_service.login(db, data.username, data.password)
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
    return staff_service.to_response(account)
