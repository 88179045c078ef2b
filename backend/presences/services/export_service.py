"""
Exports CSV des rapports (séparateur point-virgule, lisible par Excel FR).
Projections pures des rapports, sans calcul propre.
"""

import csv
import io
from typing import List

from presences.schemas.report import MonthlyMatrix, SectionSummary

SEPARATOR = ";"
EMPTY_CELL = "-"


def daily_summary_csv(summaries: List[SectionSummary]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=SEPARATOR, lineterminator="\n")
    writer.writerow(["SECTION", "INSCRITS", "PRESENTS", "ABSENTS", "JUSTIFIES", "TAUX %"])
    for s in summaries:
        writer.writerow([s.section, s.enrollment, s.present, s.absent, s.excused, f"{s.achievement_rate}%"])
    return buffer.getvalue()


def monthly_matrix_csv(matrix: MonthlyMatrix) -> str:
    """Une colonne par jour ouvré ; les week-ends sont omis."""
    school_days = [d for d in matrix.days if not d.is_weekend]

    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=SEPARATOR, lineterminator="\n")
    writer.writerow(
        ["ELEVE"]
        + [f"{d.label}{d.day}" for d in school_days]
        + ["TOTAL PRESENTS", "TOTAL ABSENTS", "TOTAL JUSTIFIES"]
    )
    for student in matrix.students:
        row = matrix.cells.get(student.id, {})
        totals = matrix.student_totals[student.id]
        writer.writerow(
            [student.full_name]
            + [row[d.day].value if d.day in row else EMPTY_CELL for d in school_days]
            + [totals.present, totals.absent, totals.excused]
        )
    return buffer.getvalue()
