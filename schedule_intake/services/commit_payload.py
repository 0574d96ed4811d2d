"""Shaping complete records into the persistence payload."""
import re
from typing import List, Optional, Sequence

from schedule_intake.models.canonical_record import CanonicalRecord
from schedule_intake.models.session_state import CommitRecord

_LEADING_NON_DIGITS = re.compile(r"^[^\d]*")
_CLOCK_TIME = re.compile(r"^\d{1,2}:\d{2}")


def clean_time(value: str, has_day: bool, default_time: str) -> Optional[str]:
    """Strip export noise before the clock time ("V04:45 PM" -> "04:45 PM").
    
    When the record has a day but no recognizable clock time, the default
    time is used.
    """
    time_text = _LEADING_NON_DIGITS.sub("", value or "").strip() or None
    if has_day and (not time_text or not _CLOCK_TIME.match(time_text)):
        return default_time
    return time_text


def build_commit_record(record: CanonicalRecord, default_time: str) -> CommitRecord:
    """Map one complete merged record to the persistence shape."""
    day = record.appointment_day or None
    time_text = clean_time(record.appointment_time, bool(day), default_time)
    
    timestamp = None
    if day and time_text:
        timestamp = f"{day} {time_text}"
    
    return CommitRecord(
        patient_name=record.patient_name or None,
        phone=record.phone or None,
        doctor_name=record.doctor_name or None,
        appointment_day=day,
        appointment_time=timestamp,
        summary=record.appointment_reason or None,
        status="pending",
    )


def build_commit_payload(
    records: Sequence[CanonicalRecord],
    default_time: str
) -> List[CommitRecord]:
    """Map complete records, in merged order, to commit records."""
    return [build_commit_record(record, default_time) for record in records]
