# services/attendance_service.py
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from models.attendance_model import AttendanceRecord, AttendanceSummary
from utils.diagnostics import Reporter, emit

_DURATION_PATTERN = re.compile(r"^\s*(\d+)h(\d{1,2})\s*$")

JUSTIFIED = "justified_duration"
UNJUSTIFIED = "unjustified_duration"
LATE = "late_duration"


def format_minutes(total_minutes: int) -> str:
    """Format a number of minutes as "HHhMM" (hours are not capped at 99)."""
    hours, minutes = divmod(max(int(total_minutes), 0), 60)
    return f"{hours:02d}h{minutes:02d}"


def parse_minutes(text: str) -> int:
    """Inverse of format_minutes; anything that is not "HHhMM" counts as 0."""
    match = _DURATION_PATTERN.match(text or "")
    if not match:
        return 0
    return int(match.group(1)) * 60 + int(match.group(2))


def parse_attendance_record(
    raw: Union[AttendanceRecord, Mapping[str, Any]],
    report: Optional[Reporter] = None
) -> AttendanceRecord:
    if isinstance(raw, AttendanceRecord):
        return raw
    return AttendanceRecord.model_validate(dict(raw), context={"report": report})


def classify(record: AttendanceRecord) -> str:
    """Pick the bucket a record counts towards; lateness wins over justification."""
    if record.is_late:
        return LATE
    if record.is_justified:
        return JUSTIFIED
    return UNJUSTIFIED


def _add_to_bucket(summary: AttendanceSummary, bucket: str, minutes: int) -> None:
    current = parse_minutes(getattr(summary, bucket))
    setattr(summary, bucket, format_minutes(current + minutes))


def aggregate_absences(
    records: Iterable[Union[AttendanceRecord, Mapping[str, Any]]],
    report: Optional[Reporter] = None
) -> List[AttendanceSummary]:
    """
    Fold absence/lateness rows into one summary per student.

    Students come out in the order they first appear in `records`. Rows
    whose end offset is not after their start offset change nothing but
    still register the student.
    """
    summaries: Dict[str, AttendanceSummary] = {}

    for index, raw in enumerate(records):
        record = parse_attendance_record(raw, report)

        summary = summaries.get(record.student_id)
        if summary is None:
            summary = AttendanceSummary(
                student_id=record.student_id,
                student_last_name=record.student_last_name,
                student_first_name=record.student_first_name,
            )
            summaries[record.student_id] = summary

        duration = record.duration
        if duration <= 0:
            if duration < 0:
                emit(report, f"Absence row {index} for student {record.student_id!r} ends before it starts; ignored")
            continue

        _add_to_bucket(summary, classify(record), duration)

    return list(summaries.values())
