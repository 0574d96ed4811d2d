"""Ingest session: the multi-file upload workflow as a state machine.

Stages:
    1 AWAITING_FIRST_FILE   - nothing uploaded yet
    2 AWAITING_MORE_FIELDS  - some required field is missing somewhere,
                              or the batch spans more than one day
    3 READY_TO_COMMIT       - every record complete, one appointment day

The stage is always derived from the current state, never set directly.
Every add_file() re-runs merge and validation over all files uploaded so
far; fix_record() re-runs validation only.
"""
from typing import Any, Dict, List, Mapping, Optional, Sequence

import structlog

from schedule_intake.config import IntakeSettings, get_settings
from schedule_intake.errors.exceptions import (
    CommitPartialError,
    FormatError,
    RecordNotFoundError,
    ValidationError,
)
from schedule_intake.models.canonical_record import (
    CanonicalRecord,
    DATA_FIELDS,
    REQUIRED_FIELDS,
)
from schedule_intake.models.session_state import (
    CommitRecord,
    IncompleteRecord,
    IncompleteSummary,
    SessionSnapshot,
    Stage,
)
from schedule_intake.models.upload import (
    AddFilesResult,
    FileFailure,
    FileSummary,
    Upload,
    UploadedFile,
)
from schedule_intake.parsers.parser_registry import create_reader_instance
from schedule_intake.services.canonicalizer import (
    FieldCanonicalizer,
    normalize_field,
    split_day_time,
)
from schedule_intake.services.commit_payload import build_commit_payload
from schedule_intake.services.merge_engine import MergeEngine
from schedule_intake.services.validation import ValidationEngine, ValidationReport

logger = structlog.get_logger(__name__)


class IngestSession:
    """Accumulates uploaded files and tracks readiness to commit.
    
    One session is driven by one caller; sessions share no state, so
    concurrent uploads need one session each.
    
    Example:
        session = IngestSession()
        result = session.add_files([Upload(file_name="mon.csv", content=data)])
        if session.stage is Stage.READY_TO_COMMIT:
            records = session.commit()
    """
    
    def __init__(
        self,
        settings: Optional[IntakeSettings] = None,
        canonicalizer: Optional[FieldCanonicalizer] = None,
        merge_engine: Optional[MergeEngine] = None,
        validation_engine: Optional[ValidationEngine] = None,
    ):
        self.settings = settings or get_settings()
        self._canonicalizer = canonicalizer or FieldCanonicalizer()
        self._merge_engine = merge_engine or MergeEngine()
        self._validation_engine = validation_engine or ValidationEngine()
        
        self._files: List[UploadedFile] = []
        self._merged: List[CanonicalRecord] = []
        self._patches: Dict[str, Dict[str, str]] = {}
        self._report = ValidationReport()
    
    # ========== State ==========
    
    @property
    def files(self) -> List[UploadedFile]:
        return list(self._files)
    
    @property
    def merged_records(self) -> List[CanonicalRecord]:
        return list(self._merged)
    
    @property
    def report(self) -> ValidationReport:
        return self._report
    
    @property
    def complete_records(self) -> List[CanonicalRecord]:
        return list(self._report.complete)
    
    @property
    def incomplete_records(self) -> List[IncompleteRecord]:
        return list(self._report.incomplete)
    
    @property
    def missing_fields(self) -> List[str]:
        """Required fields missing on at least one record (all of them before any upload)."""
        if not self._files:
            return list(REQUIRED_FIELDS)
        return list(self._report.missing_fields)
    
    @property
    def merge_error(self) -> str:
        return self._report.merge_error
    
    @property
    def has_error(self) -> bool:
        """Date-conflict overlay; blocks READY_TO_COMMIT while set."""
        return self._report.has_date_conflict
    
    @property
    def stage(self) -> Stage:
        if not self._files:
            return Stage.AWAITING_FIRST_FILE
        if self._report.missing_fields or self.has_error:
            return Stage.AWAITING_MORE_FIELDS
        return Stage.READY_TO_COMMIT
    
    def snapshot(self) -> SessionSnapshot:
        """Current state in the shape the UI renders."""
        return SessionSnapshot(
            stage=self.stage,
            files=[FileSummary(file_name=f.file_name, row_count=f.row_count) for f in self._files],
            merged_records=self.merged_records,
            missing_fields=self.missing_fields,
            merge_error=self.merge_error,
            incomplete=[
                IncompleteSummary(id=item.record.id, missing_fields=item.missing_fields)
                for item in self._report.incomplete
            ],
        )
    
    # ========== Operations ==========
    
    def parse_upload(self, upload: Upload) -> UploadedFile:
        """Decode and canonicalize one upload without touching session state.
        
        Raises:
            FormatError: If the file type is unsupported or the file unreadable
        """
        reader = create_reader_instance(upload.resolved_extension, settings=self.settings)
        table = reader.read(upload.content, upload.file_name)
        
        file_position = len(self._files)
        rows = []
        for row_position, raw in enumerate(table.rows):
            record = self._canonicalizer.canonicalize(raw)
            record.source_ref = f"{file_position}:{row_position}"
            rows.append(record)
        
        return UploadedFile(
            file_name=upload.file_name,
            rows=rows,
            columns_present=table.columns_present,
        )
    
    def add_file(self, upload: Upload) -> AddFilesResult:
        """Add a single file; see add_files()."""
        return self.add_files([upload])
    
    def add_files(self, uploads: Sequence[Upload]) -> AddFilesResult:
        """Parse uploads in order, keep the readable ones, then re-merge.
        
        A file that fails to parse is reported in the result and skipped;
        it never aborts the rest of the batch.
        """
        result = AddFilesResult()
        
        for upload in uploads:
            log = logger.bind(file_name=upload.file_name)
            try:
                uploaded = self.parse_upload(upload)
            except FormatError as e:
                log.warning("upload_rejected", error=e.message)
                result.failures.append(FileFailure(file_name=upload.file_name, error=e.message))
                continue
            
            self._files.append(uploaded)
            result.accepted.append(
                FileSummary(file_name=uploaded.file_name, row_count=uploaded.row_count)
            )
            log.info(
                "upload_accepted",
                rows=uploaded.row_count,
                columns_present=uploaded.columns_present,
            )
        
        self._recompute()
        return result
    
    def fix_record(self, record_id: str, field_values: Mapping[str, Any]) -> CanonicalRecord:
        """Patch fields of one merged record, then re-validate.
        
        Values are normalized like uploaded values. The patch is remembered
        and re-applied when later uploads trigger a re-merge.
        
        Raises:
            ValidationError: If a field name is not a canonical data field
            RecordNotFoundError: If no merged record has this id
        """
        unknown = sorted(set(field_values) - set(DATA_FIELDS))
        if unknown:
            raise ValidationError(
                f"Unknown fields: {', '.join(unknown)}",
                details={"allowed": list(DATA_FIELDS)},
            )
        
        record = self._find_record(record_id)
        patch = self._normalize_patch(record, field_values)
        self._patches.setdefault(record_id, {}).update(patch)
        self._apply_patch(record, patch)
        
        self._report = self._validation_engine.validate(self._merged)
        logger.info(
            "record_fixed",
            record_id=record_id,
            fields=sorted(patch),
            stage=int(self.stage),
        )
        return record
    
    def reset(self) -> None:
        """Discard all files, records and patches."""
        self._files = []
        self._merged = []
        self._patches = {}
        self._merge_engine.reset()
        self._report = ValidationReport()
        logger.info("session_reset")
    
    def commit(self, save_completed_only: bool = False) -> List[CommitRecord]:
        """Return commit records for every complete merged record.
        
        Allowed when the session is READY_TO_COMMIT, or when it still has
        incomplete records and the caller explicitly confirms with
        ``save_completed_only=True``. The file list is left untouched; call
        reset() once the records are persisted.
        
        Raises:
            MergeConflictError: If the batch spans more than one day
            CommitPartialError: If no record is complete, or if incomplete
                records remain without explicit confirmation
        """
        report = self._report
        conflict = report.conflict_error()
        if conflict is not None:
            raise conflict
        
        complete_count = len(report.complete)
        incomplete_count = len(report.incomplete)
        
        if complete_count == 0:
            raise CommitPartialError(
                "No complete records to save. Fix missing fields before saving.",
                complete_count=0,
                incomplete_count=incomplete_count,
            )
        
        if incomplete_count and not save_completed_only:
            raise CommitPartialError(
                f"{incomplete_count} record(s) still missing required fields. "
                f"Confirm to save ONLY the {complete_count} complete records.",
                complete_count=complete_count,
                incomplete_count=incomplete_count,
            )
        
        payload = build_commit_payload(report.complete, self.settings.default_appointment_time)
        logger.info(
            "session_committed",
            committed=len(payload),
            skipped_incomplete=incomplete_count,
        )
        return payload
    
    # ========== Internals ==========
    
    def _recompute(self) -> None:
        """Re-merge every file from scratch with stored patches, then re-validate."""
        all_rows = [row for uploaded in self._files for row in uploaded.rows]
        self._merged = self._merge_engine.merge(all_rows, patches=self._patches).records
        
        self._report = self._validation_engine.validate(self._merged)
        logger.info(
            "session_recomputed",
            files=len(self._files),
            merged_records=len(self._merged),
            missing_fields=self._report.missing_fields,
            stage=int(self.stage),
        )
    
    def _find_record(self, record_id: str) -> CanonicalRecord:
        for record in self._merged:
            if record.id == record_id:
                return record
        raise RecordNotFoundError(f"No merged record with id '{record_id}'")
    
    @staticmethod
    def _apply_patch(record: CanonicalRecord, patch: Mapping[str, str]) -> None:
        for name, value in patch.items():
            setattr(record, name, value)
    
    @staticmethod
    def _normalize_patch(
        record: CanonicalRecord,
        field_values: Mapping[str, Any]
    ) -> Dict[str, str]:
        """Normalize manual values the way uploaded cells are normalized."""
        patch = {name: normalize_field(name, value) for name, value in field_values.items()}
        
        if "appointment_day" in patch:
            day, time_part = split_day_time(patch["appointment_day"])
            patch["appointment_day"] = day
            if time_part and not patch.get("appointment_time") and record.is_blank("appointment_time"):
                patch["appointment_time"] = time_part
        return patch
