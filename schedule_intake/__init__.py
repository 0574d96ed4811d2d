"""Multi-file appointment schedule ingestion and reconciliation."""
from schedule_intake.errors import (
    IntakeError,
    FormatError,
    ValidationError,
    RecordNotFoundError,
    MergeConflictError,
    CommitPartialError,
)
from schedule_intake.models import (
    CanonicalRecord,
    CommitRecord,
    SessionSnapshot,
    Stage,
    Upload,
)
from schedule_intake.parsers import load_upload
from schedule_intake.services.ingest_session import IngestSession

__all__ = [
    "IngestSession",
    "Upload",
    "load_upload",
    "CanonicalRecord",
    "CommitRecord",
    "SessionSnapshot",
    "Stage",
    "IntakeError",
    "FormatError",
    "ValidationError",
    "RecordNotFoundError",
    "MergeConflictError",
    "CommitPartialError",
]
