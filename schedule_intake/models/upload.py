"""Pydantic models for uploaded schedule files."""
from pathlib import PurePath
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from schedule_intake.models.canonical_record import CanonicalRecord


class Upload(BaseModel):
    """Raw file content handed to the session by the transport layer."""
    
    file_name: str = Field(
        ...,
        min_length=1,
        description="Original file name as uploaded"
    )
    content: bytes = Field(..., description="Raw file bytes")
    extension: Optional[str] = Field(
        default=None,
        description="Declared extension (csv, xlsx, xls); derived from file_name if omitted"
    )
    
    @field_validator('extension')
    @classmethod
    def normalize_extension(cls, v: Optional[str]) -> Optional[str]:
        """Lowercase the declared extension and drop a leading dot."""
        if v is None:
            return v
        v = v.strip().lower().lstrip('.')
        return v or None
    
    @property
    def resolved_extension(self) -> str:
        """Declared extension, or the file name suffix."""
        if self.extension:
            return self.extension
        return PurePath(self.file_name).suffix.lower().lstrip('.')


class UploadedFile(BaseModel):
    """One ingested file, retained for audit and listing."""
    
    file_name: str
    rows: List[CanonicalRecord] = Field(default_factory=list)
    columns_present: List[str] = Field(
        default_factory=list,
        description="Normalized header labels found in the file"
    )
    
    @property
    def row_count(self) -> int:
        return len(self.rows)


class FileSummary(BaseModel):
    """File listing entry exposed to the UI."""
    
    file_name: str
    row_count: int = Field(..., ge=0)


class FileFailure(BaseModel):
    """A file that could not be ingested, with the reason."""
    
    file_name: str
    error: str


class AddFilesResult(BaseModel):
    """Outcome of one add_files batch."""
    
    accepted: List[FileSummary] = Field(default_factory=list)
    failures: List[FileFailure] = Field(default_factory=list)
    
    @property
    def has_failures(self) -> bool:
        return bool(self.failures)
