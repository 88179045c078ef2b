"""
Configuration partagée pour tous les tests.
Chaque test reçoit une base SQLite en mémoire, initialisée comme au premier démarrage
(compte administrateur + collections vides), et la dépendance get_db est redirigée dessus.
"""

import os

# Avant tout import de presences : le moteur applicatif ne doit pas créer de fichier
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import presences.models  # noqa: F401
from presences.database import Base, get_db
from presences.main import app
from presences.services import record_store


@pytest.fixture
def db():
    """Session sur une base en mémoire partagée entre threads (TestClient)."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    record_store.initialize(session)
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def client(db):
    """Client HTTP de test branché sur la base en mémoire."""
    app.dependency_overrides[get_db] = lambda: db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    """En-tête de session de l'administrateur initial."""
    return {"X-Staff-Id": "admin-1"}
