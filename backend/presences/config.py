"""
Configuration centrale de l'application via variables d'environnement.
Charger depuis un fichier .env en développement.
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from presences.schemas.attendance import AttendanceStatus


class Settings(BaseSettings):
    # Base de données (une ligne JSON par collection)
    DATABASE_URL: str = "sqlite:///./presences.db"

    # Compte administrateur initial (protégé)
    SEED_ADMIN_ID: str = "admin-1"
    SEED_ADMIN_USERNAME: str = "admin"
    SEED_ADMIN_PASSWORD: str = "admin123"

    # Assistant IA (Gemini)
    GEMINI_API_KEY: str = ""
    GEMINI_MODEL: str = "gemini-2.5-flash"
    ASSISTANT_TIMEOUT_SECONDS: float = 20.0

    # Détection des élèves à risque
    RISK_THRESHOLD: int = 3
    RISK_TOP_N: int = 5

    # Statut appliqué aux élèves non marqués lors de l'enregistrement (None = laisser vide)
    DEFAULT_UNMARKED_TO: Optional[str] = None

    # Environnement
    ENV: str = "development"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("DEFAULT_UNMARKED_TO", mode="before")
    @classmethod
    def known_status(cls, v):
        if v is None or not str(v).strip():
            return None
        v = str(v).strip().upper()
        if v not in {s.value for s in AttendanceStatus}:
            raise ValueError(f"DEFAULT_UNMARKED_TO doit valoir A, I ou IJ (reçu : '{v}')")
        return v


settings = Settings()
