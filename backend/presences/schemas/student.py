"""
Schémas Pydantic pour les élèves et leur classe (niveau + section).
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, field_validator


class Sex(str, Enum):
    MALE = "M"
    FEMALE = "F"


class Shift(str, Enum):
    MORNING = "M"
    AFTERNOON = "T"


class ClassSection(BaseModel):
    """
    Clé de regroupement (niveau, section). Ce n'est pas une entité stockée :
    elle est dérivée des élèves. Forme texte : "3-A".
    """
    model_config = ConfigDict(frozen=True)

    grade: str
    section: str

    @property
    def key(self) -> str:
        return f"{self.grade}-{self.section}"

    @property
    def label(self) -> str:
        return f"{self.grade}° {self.section}"

    @classmethod
    def parse(cls, key: str) -> "ClassSection":
        grade, sep, section = key.partition("-")
        if not sep or not grade or not section:
            raise ValueError(f"Classe invalide : '{key}' (format attendu : niveau-section)")
        return cls(grade=grade, section=section)


class Student(BaseModel):
    """Élève tel qu'il est persisté dans la collection students."""
    id: str
    full_name: str
    school_id: str                    # Identifiant scolaire, clé de fusion à l'import
    national_id: Optional[str] = None
    sex: Sex = Sex.MALE
    grade: str
    section: str
    shift: Shift = Shift.MORNING
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    address: Optional[str] = None

    @property
    def class_section(self) -> ClassSection:
        return ClassSection(grade=self.grade, section=self.section)

    def belongs_to(self, section: ClassSection) -> bool:
        return self.grade == section.grade and self.section == section.section


class StudentCreate(BaseModel):
    """Schéma de création manuelle d'un élève (POST /students)."""
    full_name: str
    school_id: str
    national_id: Optional[str] = None
    sex: Sex = Sex.MALE
    grade: str = "1"
    section: str = "A"
    shift: Shift = Shift.MORNING
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("full_name", "school_id", "grade", "section")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()


class StudentUpdate(BaseModel):
    """Schéma de mise à jour d'un élève (PUT /students/{id})."""
    full_name: Optional[str] = None
    school_id: Optional[str] = None
    national_id: Optional[str] = None
    sex: Optional[Sex] = None
    grade: Optional[str] = None
    section: Optional[str] = None
    shift: Optional[Shift] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("full_name", "school_id", "grade", "section")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip() if v else v


class ImportError(BaseModel):
    """Détail d'une ligne rejetée lors de l'import."""
    row: int
    content: str
    reason: str


class StudentImportReport(BaseModel):
    """Rapport retourné après un import CSV."""
    total_rows: int
    inserted: int
    updated: int
    rejected: int
    errors: List[ImportError]
