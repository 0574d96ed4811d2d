"""Pydantic model for canonical appointment records."""
from typing import List, Optional, Tuple

from pydantic import BaseModel, Field


# Data fields in canonical order (everything except the id)
DATA_FIELDS: Tuple[str, ...] = (
    "patient_name",
    "phone",
    "appointment_reason",
    "appointment_day",
    "appointment_time",
    "doctor_name",
    "health_number",
    "insurance_number",
)

# A record is complete only when all of these are non-blank
REQUIRED_FIELDS: Tuple[str, ...] = (
    "patient_name",
    "phone",
    "appointment_reason",
    "appointment_day",
)


class CanonicalRecord(BaseModel):
    """One appointment expressed in the fixed target schema.
    
    Records are produced by the canonicalizer without an id. The merge engine
    assigns the id once, when the record first enters a merged set, and never
    recomputes it.
    """
    
    id: Optional[str] = Field(
        default=None,
        description="Opaque identifier assigned by the merge engine"
    )
    patient_name: str = Field(default="", description="Patient full name")
    phone: str = Field(
        default="",
        description="Exactly 10 digits, or empty"
    )
    appointment_reason: str = Field(default="", description="Reason for visit")
    appointment_day: str = Field(
        default="",
        description="YYYY-MM-DD, or the original string if it could not be parsed"
    )
    appointment_time: str = Field(default="", description="Appointment time as found")
    doctor_name: str = Field(default="", description="Doctor or provider name")
    health_number: str = Field(default="", description="Health card number, digits only")
    insurance_number: str = Field(default="", description="Insurance / primary id, digits only")
    source_ref: Optional[str] = Field(
        default=None,
        exclude=True,
        description="Position of the source row within the session (file:row)"
    )
    
    def is_blank(self, field_name: str) -> bool:
        """Return True if the named field is empty or whitespace-only."""
        return not str(getattr(self, field_name) or "").strip()
    
    def missing_fields(self, required: Tuple[str, ...] = REQUIRED_FIELDS) -> List[str]:
        """Return required fields that are blank on this record, in order."""
        return [name for name in required if self.is_blank(name)]
    
    model_config = {
        "json_schema_extra": {
            "example": {
                "id": "6f1c3f0e-2b7a-4c55-9c1e-0d9f8f0b2a11",
                "patient_name": "John Doe",
                "phone": "4165551234",
                "appointment_reason": "Checkup",
                "appointment_day": "2025-01-15",
                "appointment_time": "10:30 AM",
                "doctor_name": "Dr. Patel",
                "health_number": "1234567890",
                "insurance_number": "",
            }
        }
    }
