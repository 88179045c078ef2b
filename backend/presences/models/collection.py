"""
Modèle SQLAlchemy pour la table collections.
Chaque collection (users, students, attendance) est stockée comme un document JSON unique,
réécrit en entier à chaque modification.
"""

from sqlalchemy import Column, DateTime, String, Text, func

from presences.database import Base


class StoredCollection(Base):
    __tablename__ = "collections"

    name = Column(String(50), primary_key=True)     # users, students, attendance
    payload = Column(Text, nullable=False)           # Liste JSON des entités
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
