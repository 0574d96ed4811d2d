"""Pydantic models describing session state and commit output."""
from enum import IntEnum
from typing import List, Optional

from pydantic import BaseModel, Field

from schedule_intake.models.canonical_record import CanonicalRecord
from schedule_intake.models.upload import FileSummary


class Stage(IntEnum):
    """Derived readiness level of an ingest session."""
    AWAITING_FIRST_FILE = 1
    AWAITING_MORE_FIELDS = 2
    READY_TO_COMMIT = 3


class IncompleteRecord(BaseModel):
    """A merged record still missing required fields."""
    
    record: CanonicalRecord
    missing_fields: List[str] = Field(default_factory=list)
    
    @property
    def id(self) -> Optional[str]:
        return self.record.id


class IncompleteSummary(BaseModel):
    """Per-record repair hint for the UI."""
    
    id: str
    missing_fields: List[str]


class SessionSnapshot(BaseModel):
    """Everything a caller needs to render the upload workflow."""
    
    stage: Stage
    files: List[FileSummary] = Field(default_factory=list)
    merged_records: List[CanonicalRecord] = Field(default_factory=list)
    missing_fields: List[str] = Field(default_factory=list)
    merge_error: str = ""
    incomplete: List[IncompleteSummary] = Field(default_factory=list)


class CommitRecord(BaseModel):
    """Record shape handed to the persistence collaborator.
    
    Storage-level identifiers and any downstream trigger keyed off
    ``status="pending"`` belong to the collaborator.
    """
    
    patient_name: Optional[str] = None
    phone: Optional[str] = None
    doctor_name: Optional[str] = None
    appointment_day: Optional[str] = None
    appointment_time: Optional[str] = Field(
        default=None,
        description="Full '<day> <time>' timestamp"
    )
    summary: Optional[str] = Field(
        default=None,
        description="Appointment reason"
    )
    status: str = "pending"
    
    model_config = {
        "json_schema_extra": {
            "example": {
                "patient_name": "John Doe",
                "phone": "4165551234",
                "doctor_name": "Dr. Patel",
                "appointment_day": "2025-01-15",
                "appointment_time": "2025-01-15 09:00 AM",
                "summary": "Checkup",
                "status": "pending",
            }
        }
    }
