"""
Schémas Pydantic pour le personnel (administrateurs et enseignants).
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, field_validator, model_validator


class Role(str, Enum):
    ADMIN = "admin"
    TEACHER = "teacher"


class StaffAccount(BaseModel):
    """Compte tel qu'il est persisté dans la collection users."""
    id: str
    first_name: str
    last_name: str
    username: str
    password: str = ""
    role: Role
    grade: Optional[str] = None      # Classe assignée (enseignants uniquement)
    section: Optional[str] = None
    active: bool = True

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


def _strip_required(v: str) -> str:
    if not v.strip():
        raise ValueError("Le champ ne peut pas être vide.")
    return v.strip()


class StaffCreate(BaseModel):
    """Schéma de création d'un compte (POST /staff)."""
    first_name: str
    last_name: str
    username: str
    password: str
    role: Role = Role.TEACHER
    grade: Optional[str] = None
    section: Optional[str] = None
    active: bool = True

    @field_validator("first_name", "last_name", "username", "password")
    @classmethod
    def not_empty(cls, v: str) -> str:
        return _strip_required(v)

    @model_validator(mode="after")
    def teacher_has_class(self) -> "StaffCreate":
        if self.role == Role.TEACHER and not (self.grade and self.section):
            raise ValueError("Un enseignant doit avoir un niveau et une section assignés.")
        return self


class StaffUpdate(BaseModel):
    """Schéma de mise à jour partielle d'un compte (PUT /staff/{id})."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    role: Optional[Role] = None
    grade: Optional[str] = None
    section: Optional[str] = None

    @field_validator("first_name", "last_name", "username", "password")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        return _strip_required(v)


class StaffResponse(BaseModel):
    """Compte renvoyé par l'API, sans le mot de passe."""
    id: str
    first_name: str
    last_name: str
    username: str
    role: Role
    grade: Optional[str]
    section: Optional[str]
    active: bool
    protected: bool = False


class LoginRequest(BaseModel):
    username: str
    password: str
