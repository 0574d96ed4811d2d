"""Pydantic validation models."""
from schedule_intake.models.canonical_record import (
    CanonicalRecord,
    DATA_FIELDS,
    REQUIRED_FIELDS,
)
from schedule_intake.models.upload import (
    Upload,
    UploadedFile,
    FileSummary,
    FileFailure,
    AddFilesResult,
)
from schedule_intake.models.session_state import (
    Stage,
    IncompleteRecord,
    IncompleteSummary,
    SessionSnapshot,
    CommitRecord,
)

__all__ = [
    "CanonicalRecord",
    "DATA_FIELDS",
    "REQUIRED_FIELDS",
    "Upload",
    "UploadedFile",
    "FileSummary",
    "FileFailure",
    "AddFilesResult",
    "Stage",
    "IncompleteRecord",
    "IncompleteSummary",
    "SessionSnapshot",
    "CommitRecord",
]
