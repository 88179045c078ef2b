"""
Schémas Pydantic pour les présences journalières.
"""

import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, model_validator


class AttendanceStatus(str, Enum):
    """Statuts possibles ; les valeurs sont les codes stockés."""
    PRESENT = "A"
    ABSENT = "I"
    EXCUSED_ABSENT = "IJ"


def event_id(student_id: str, day: datetime.date) -> str:
    """Identifiant composite d'une présence : une seule par (élève, jour)."""
    return f"{student_id}_{day.isoformat()}"


class AttendanceEvent(BaseModel):
    """Présence telle qu'elle est persistée dans la collection attendance."""
    id: str
    student_id: str
    date: datetime.date
    status: AttendanceStatus

    @classmethod
    def build(cls, student_id: str, day: datetime.date, status: AttendanceStatus) -> "AttendanceEvent":
        return cls(id=event_id(student_id, day), student_id=student_id, date=day, status=status)


class DayMapResponse(BaseModel):
    """Feuille d'appel du jour pour une classe (GET /attendance/{section}/{date})."""
    section: str
    date: datetime.date
    enrolled: int
    marked: int
    marks: Dict[str, AttendanceStatus]  # Les élèves non marqués sont absents du dictionnaire


class ToggleRequest(BaseModel):
    """Corps de requête pour basculer le statut d'un élève dans une feuille non enregistrée."""
    marks: Dict[str, AttendanceStatus] = {}
    student_id: str
    status: AttendanceStatus


class CommitRequest(BaseModel):
    """Corps de requête pour enregistrer la feuille d'appel d'un jour."""
    marks: Dict[str, AttendanceStatus]
    default_unmarked_to: Optional[AttendanceStatus] = None
    # Laisse les élèves non marqués sans statut, même si DEFAULT_UNMARKED_TO est configuré
    leave_unset: bool = False

    @model_validator(mode="after")
    def exclusive_default(self) -> "CommitRequest":
        if self.leave_unset and self.default_unmarked_to is not None:
            raise ValueError("default_unmarked_to et leave_unset sont incompatibles.")
        return self

    def unmarked_policy(self, configured: Optional[AttendanceStatus]) -> Optional[AttendanceStatus]:
        """Statut à appliquer aux non marqués : requête, sinon configuration, sinon aucun."""
        if self.leave_unset:
            return None
        return self.default_unmarked_to or configured


class CommitResult(BaseModel):
    """Rapport d'enregistrement d'une feuille d'appel."""
    section: str
    date: datetime.date
    written: int        # Présences écrites depuis la feuille
    defaulted: int      # Élèves non marqués complétés par le statut par défaut
    unmarked: int       # Élèves de la classe laissés sans statut
    ignored: List[str]  # Identifiants hors de la classe, non enregistrés
