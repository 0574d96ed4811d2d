"""Error handling module."""
from schedule_intake.errors.exceptions import (
    IntakeError,
    FormatError,
    ValidationError,
    RecordNotFoundError,
    MergeConflictError,
    CommitPartialError,
)

__all__ = [
    "IntakeError",
    "FormatError",
    "ValidationError",
    "RecordNotFoundError",
    "MergeConflictError",
    "CommitPartialError",
]
