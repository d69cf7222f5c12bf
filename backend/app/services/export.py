"""CSV export of a user's symptom history."""

from collections.abc import Iterable
from datetime import date

from app.models.symptom import RiskAssessment, SymptomEntry

CSV_HEADER = ("Date", "Symptoms", "Risk Level", "Notes")
MISSING_RISK_LEVEL = "N/A"


def _quote(value: str) -> str:
    """Wrap in double quotes, doubling embedded quotes (RFC 4180)."""
    return '"' + value.replace('"', '""') + '"'


def export_filename(today: date | None = None) -> str:
    """Download filename for an export made on the given day."""
    today = today or date.today()
    return f"symptom-tracker-{today.isoformat()}.csv"


def build_csv(entries: Iterable[SymptomEntry], assessments: Iterable[RiskAssessment]) -> str:
    """Render entries as CSV with one row per entry.

    Each row takes its risk level from the first assessment in
    ``assessments`` that belongs to the entry (pass them newest first to
    get the latest), or "N/A" when there is none.
    """
    risk_by_entry: dict = {}
    for assessment in assessments:
        risk_by_entry.setdefault(assessment.symptom_entry_id, assessment.risk_level.value)

    lines = [",".join(CSV_HEADER)]
    for entry in entries:
        lines.append(
            ",".join(
                [
                    entry.created_at.date().isoformat(),
                    _quote(", ".join(entry.symptoms)),
                    risk_by_entry.get(entry.id, MISSING_RISK_LEVEL),
                    _quote(entry.notes or ""),
                ]
            )
        )
    return "\n".join(lines)
