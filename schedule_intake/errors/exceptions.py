"""Custom exception hierarchy for schedule intake errors."""
from typing import Any, Dict, List, Optional


class IntakeError(Exception):
    """Base exception for all schedule intake errors."""
    
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize error with message and optional structured details."""
        self.message = message
        self.details = details or {}
        super().__init__(message)


class FormatError(IntakeError):
    """Raised when an uploaded file cannot be decoded into rows.
    
    Fatal to the offending file only; the session keeps every other file.
    """
    pass


class ValidationError(IntakeError):
    """Raised when caller input fails validation (e.g. unknown field names)."""
    pass


class RecordNotFoundError(IntakeError):
    """Raised when a merged record id is not part of the session."""
    pass


class MergeConflictError(IntakeError):
    """Raised when the merged set spans more than one appointment day."""
    
    def __init__(self, dates: List[str]):
        self.dates = list(dates)
        super().__init__(
            f"Multiple appointment dates detected: {', '.join(self.dates)}. "
            f"Please upload files containing ONLY ONE date.",
            details={"dates": self.dates},
        )


class CommitPartialError(IntakeError):
    """Raised when a commit would leave incomplete records behind.
    
    Saving only the complete subset needs an explicit confirmation from the
    caller, since the incomplete rows are dropped from that batch.
    """
    
    def __init__(self, message: str, complete_count: int, incomplete_count: int):
        self.complete_count = complete_count
        self.incomplete_count = incomplete_count
        super().__init__(
            message,
            details={
                "complete_count": complete_count,
                "incomplete_count": incomplete_count,
            },
        )
