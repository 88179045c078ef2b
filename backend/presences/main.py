"""
Point d'entrée principal de l'API de gestion des présences scolaires.
Démarrage : uvicorn presences.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import presences.models  # noqa: F401 : enregistre les modèles dans Base.metadata avant create_all
from presences.database import Base, SessionLocal, engine
from presences.exceptions import CorruptStateError
from presences.routers import assistant, attendance, auth, dashboard, reports, staff, students
from presences.services import record_store

logger = logging.getLogger(__name__)


def init_storage() -> None:
    """Crée la table des collections puis le compte administrateur et les collections vides."""
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        record_store.initialize(db)
    finally:
        db.close()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Cycle de vie de l'application : initialise le stockage au démarrage."""
    init_storage()
    yield


app = FastAPI(
    title="Registre de présences API",
    description="API de gestion des présences scolaires journalières",
    version="0.1.0",
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

# CORS : autorise tous les ports localhost en développement (à restreindre en production).
app.add_middleware(
    CORSMiddleware,
    allow_origins=[],
    allow_origin_regex=r"https?://(localhost|127\.0\.0\.1)(:\d+)?",
    allow_credentials=False,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Accept", "X-Staff-Id"],
)


app.include_router(auth.router)
app.include_router(staff.router)
app.include_router(students.router)
app.include_router(attendance.router)
app.include_router(reports.router)
app.include_router(dashboard.router)
app.include_router(assistant.router)


@app.exception_handler(CorruptStateError)
async def corrupt_state_handler(request: Request, exc: CorruptStateError) -> JSONResponse:
    """Données persistées illisibles : on échoue explicitement, sans réinitialiser."""
    logger.error("État persistant corrompu : %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": f"Données enregistrées illisibles (collection '{exc.collection}')."},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Intercepte toutes les exceptions non gérées pour garantir que la réponse 500
    passe bien par CORSMiddleware (qui injecte les headers CORS).
    """
    logger.error("Exception non gérée : %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Une erreur interne est survenue."},
    )


@app.get("/api/health", tags=["Santé"])
def health_check():
    """Vérifie que l'API est opérationnelle."""
    return {"status": "ok", "service": "Registre de présences API", "version": "0.1.0"}
