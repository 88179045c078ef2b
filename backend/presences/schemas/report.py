"""
Schémas Pydantic pour les rapports (journalier, matrice mensuelle, élèves à risque, tableaux de bord).
"""

import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel

from presences.schemas.attendance import AttendanceStatus
from presences.schemas.student import Student


class SectionSummary(BaseModel):
    """Ligne du rapport journalier pour une classe."""
    section: str
    label: str
    enrollment: int
    present: int
    absent: int
    excused: int
    achievement_rate: int  # Pourcentage arrondi de présents sur inscrits


class MonthDay(BaseModel):
    day: int
    label: str          # Initiale du jour de la semaine
    is_weekend: bool


class StatusTotals(BaseModel):
    present: int = 0
    absent: int = 0
    excused: int = 0


class MonthlyMatrix(BaseModel):
    """Matrice mensuelle : une ligne par élève, une colonne par jour du mois."""
    section: str
    year: int
    month: int
    students: List[Student]
    days: List[MonthDay]
    cells: Dict[str, Dict[int, AttendanceStatus]]   # student_id → jour → statut
    student_totals: Dict[str, StatusTotals]
    day_totals: Dict[int, StatusTotals]


class CriticalStudent(BaseModel):
    student: Student
    unexcused_absences: int


class StudentActivity(BaseModel):
    """Résumé compact transmis à l'assistant IA."""
    name: str
    section: str
    present: int
    absent: int
    excused: int


class GradeDistribution(BaseModel):
    grade: str
    males: int
    females: int


class AdminOverview(BaseModel):
    date: datetime.date
    total_students: int
    total_males: int
    total_females: int
    total_teachers: int
    total_guardians: int
    attendance_rate: int
    excused_today: int
    morning_count: int
    afternoon_count: int
    grades: List[GradeDistribution]
    critical_students: List[CriticalStudent]


class TeacherOverview(BaseModel):
    date: datetime.date
    section: Optional[str]
    enrolled: int
    present: int
    attendance_rate: int
    is_school_day: bool
