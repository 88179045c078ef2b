"""
Service des tableaux de bord (administration et enseignant).
"""

import datetime
from typing import List

from sqlalchemy.orm import Session

from presences.config import settings
from presences.schemas.attendance import AttendanceStatus
from presences.schemas.report import AdminOverview, GradeDistribution, TeacherOverview
from presences.schemas.staff import Role, StaffAccount
from presences.schemas.student import Sex, Shift, Student
from presences.services import record_store
from presences.services.record_store import Collection
from presences.services.report_service import WEEKEND_DAYS, achievement_rate, tally
from presences.services.risk_service import rank_critical

GRADES = ["1", "2", "3", "4", "5", "6"]


def _count_guardians(students: List[Student]) -> int:
    """Représentants distincts (nom normalisé, plus de 2 caractères)."""
    names = {(s.guardian_name or "").strip().upper() for s in students}
    return len({n for n in names if len(n) > 2})


def admin_overview(db: Session, day: datetime.date) -> AdminOverview:
    students = record_store.get_all(db, Collection.STUDENTS)
    users = record_store.get_all(db, Collection.USERS)
    events = record_store.get_all(db, Collection.ATTENDANCE)

    today = tally(e.status for e in events if e.date == day)

    return AdminOverview(
        date=day,
        total_students=len(students),
        total_males=sum(1 for s in students if s.sex == Sex.MALE),
        total_females=sum(1 for s in students if s.sex == Sex.FEMALE),
        total_teachers=sum(1 for u in users if u.role == Role.TEACHER),
        total_guardians=_count_guardians(students),
        attendance_rate=achievement_rate(today.present, len(students)),
        excused_today=today.excused,
        morning_count=sum(1 for s in students if s.shift == Shift.MORNING),
        afternoon_count=sum(1 for s in students if s.shift == Shift.AFTERNOON),
        grades=[
            GradeDistribution(
                grade=g,
                males=sum(1 for s in students if s.grade == g and s.sex == Sex.MALE),
                females=sum(1 for s in students if s.grade == g and s.sex == Sex.FEMALE),
            )
            for g in GRADES
        ],
        critical_students=rank_critical(
            students, events, threshold=settings.RISK_THRESHOLD, limit=settings.RISK_TOP_N,
        ),
    )


def teacher_overview(db: Session, account: StaffAccount, day: datetime.date) -> TeacherOverview:
    """Présents du jour dans la classe assignée ; pas d'appel le week-end."""
    is_school_day = day.weekday() not in WEEKEND_DAYS
    if not (account.grade and account.section):
        return TeacherOverview(
            date=day, section=None, enrolled=0, present=0, attendance_rate=0, is_school_day=is_school_day,
        )

    roster_ids = {
        s.id for s in record_store.get_all(db, Collection.STUDENTS)
        if s.grade == account.grade and s.section == account.section
    }
    present = sum(
        1 for e in record_store.get_all(db, Collection.ATTENDANCE)
        if e.date == day and e.status == AttendanceStatus.PRESENT and e.student_id in roster_ids
    )

    return TeacherOverview(
        date=day,
        section=f"{account.grade}-{account.section}",
        enrolled=len(roster_ids),
        present=present,
        attendance_rate=achievement_rate(present, len(roster_ids)),
        is_school_day=is_school_day,
    )
