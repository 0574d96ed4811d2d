"""Completeness and date-consistency checks over a merged record set."""
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import structlog

from schedule_intake.errors.exceptions import MergeConflictError
from schedule_intake.models.canonical_record import CanonicalRecord, REQUIRED_FIELDS
from schedule_intake.models.session_state import IncompleteRecord

logger = structlog.get_logger(__name__)


@dataclass
class ValidationReport:
    """Result of validating one merged set."""
    
    complete: List[CanonicalRecord] = field(default_factory=list)
    incomplete: List[IncompleteRecord] = field(default_factory=list)
    missing_fields: List[str] = field(default_factory=list)
    distinct_days: List[str] = field(default_factory=list)
    
    @property
    def has_date_conflict(self) -> bool:
        return len(self.distinct_days) > 1
    
    @property
    def merge_error(self) -> str:
        """User-facing conflict message, or '' when the batch is consistent."""
        conflict = self.conflict_error()
        return conflict.message if conflict else ""
    
    def conflict_error(self) -> Optional[MergeConflictError]:
        """MergeConflictError naming every distinct day, or None."""
        if not self.has_date_conflict:
            return None
        return MergeConflictError(self.distinct_days)


class ValidationEngine:
    """Classifies merged records as complete or incomplete.
    
    A record is incomplete when any required field is empty or
    whitespace-only. Independently of completeness, a batch is in conflict
    when its records carry more than one distinct appointment day: a batch
    is one clinic day, and a conflict is never resolved by picking a date.
    """
    
    def __init__(self, required_fields: Tuple[str, ...] = REQUIRED_FIELDS):
        self.required_fields = tuple(required_fields)
    
    def validate(self, records: Sequence[CanonicalRecord]) -> ValidationReport:
        """Validate a merged set; never raises."""
        report = ValidationReport()
        missing_union = set()
        
        for record in records:
            missing = record.missing_fields(self.required_fields)
            if missing:
                report.incomplete.append(
                    IncompleteRecord(record=record, missing_fields=missing)
                )
                missing_union.update(missing)
            else:
                report.complete.append(record)
            
            day = record.appointment_day.strip()
            if day and day not in report.distinct_days:
                report.distinct_days.append(day)
        
        report.missing_fields = [f for f in self.required_fields if f in missing_union]
        
        if report.has_date_conflict:
            logger.warning("appointment_date_conflict", dates=report.distinct_days)
        
        logger.debug(
            "validation_completed",
            complete=len(report.complete),
            incomplete=len(report.incomplete),
            missing_fields=report.missing_fields,
        )
        return report
