"""Identity resolution and blank-filling merge of canonical records.

Records from every uploaded file are folded, in upload order, into one
deduplicated set. Two records are the same patient when they share any
identity key (insurance, phone, health number or normalized name). A
match only fills fields that are still empty on the surviving record:
the first populated value always wins.
"""
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence
from uuid import uuid4

import structlog

from schedule_intake.models.canonical_record import CanonicalRecord, DATA_FIELDS
from schedule_intake.services.normalize import norm_name

logger = structlog.get_logger(__name__)


def key_candidates(record: CanonicalRecord) -> List[str]:
    """Typed identity keys in priority order: insurance, phone, health, name."""
    keys = []
    if record.insurance_number:
        keys.append(f"ins:{record.insurance_number}")
    if record.phone:
        keys.append(f"phone:{record.phone}")
    if record.health_number:
        keys.append(f"health:{record.health_number}")
    name = norm_name(record.patient_name)
    if name:
        keys.append(f"name:{name}")
    return keys


def preferred_key(record: CanonicalRecord) -> Optional[str]:
    """Single dedup key: insurance, else phone, else name."""
    if record.insurance_number:
        return f"ins:{record.insurance_number}"
    if record.phone:
        return f"phone:{record.phone}"
    name = norm_name(record.patient_name)
    if name:
        return f"name:{name}"
    return None


class KeyIndex:
    """Many-to-one map from identity key to the merged record owning it.
    
    Keys are only ever added; a key keeps pointing at the first record that
    claimed it.
    """
    
    def __init__(self) -> None:
        self._index: Dict[str, CanonicalRecord] = {}
    
    def __len__(self) -> int:
        return len(self._index)
    
    def __contains__(self, key: str) -> bool:
        return key in self._index
    
    def find(self, record: CanonicalRecord) -> Optional[CanonicalRecord]:
        """Return the owner of the first of the record's keys already indexed."""
        for key in key_candidates(record):
            owner = self._index.get(key)
            if owner is not None:
                return owner
        return None
    
    def register(self, record: CanonicalRecord) -> int:
        """Index every key of the record not yet claimed; return how many were added."""
        added = 0
        for key in key_candidates(record):
            if key not in self._index:
                self._index[key] = record
                added += 1
        return added


@dataclass
class MergeStats:
    """Statistics from one merge pass."""
    
    input_records: int = 0
    new_records: int = 0
    matched_records: int = 0
    fields_filled: int = 0
    duplicates_removed: int = 0
    
    @property
    def merged_records(self) -> int:
        return self.new_records - self.duplicates_removed


@dataclass
class MergeResult:
    """Merged, deduplicated records plus pass statistics."""
    
    records: List[CanonicalRecord] = field(default_factory=list)
    stats: MergeStats = field(default_factory=MergeStats)


class MergeEngine:
    """Folds canonical records into a deduplicated set.
    
    The engine is recomputed from scratch on every call; the only state kept
    between calls is the id registry, so a merged record created from the
    same source row receives the same id on every pass.
    
    Example:
        engine = MergeEngine()
        result = engine.merge(records_from_all_files)
        print(f"{len(result.records)} patients, {result.stats.matched_records} rows merged")
    """
    
    def __init__(self, id_factory: Optional[Callable[[], str]] = None):
        """
        Initialize MergeEngine.
        
        Args:
            id_factory: Generates ids for new records (default: uuid4 strings)
        """
        self._id_factory = id_factory or (lambda: str(uuid4()))
        self._issued_ids: Dict[str, str] = {}
    
    def reset(self) -> None:
        """Forget every issued id."""
        self._issued_ids.clear()
    
    def merge(
        self,
        records: Sequence[CanonicalRecord],
        patches: Optional[Mapping[str, Mapping[str, str]]] = None
    ) -> MergeResult:
        """
        Merge records in order into a deduplicated set.
        
        Input records are never mutated; the result holds copies.
        
        Args:
            records: Canonical records of all files, in upload and row order
            patches: Manual field values by record id; applied as soon as the
                record is created, so patched keys take part in matching
        
        Returns:
            MergeResult with merged records and statistics
        """
        patches = patches or {}
        stats = MergeStats(input_records=len(records))
        index = KeyIndex()
        merged: List[CanonicalRecord] = []
        
        for incoming in records:
            existing = index.find(incoming)
            
            if existing is None:
                created = incoming.model_copy()
                created.id = self._assign_id(incoming)
                for name, value in patches.get(created.id, {}).items():
                    setattr(created, name, value)
                merged.append(created)
                index.register(created)
                stats.new_records += 1
                continue
            
            stats.matched_records += 1
            for name in DATA_FIELDS:
                incoming_value = getattr(incoming, name)
                if incoming_value and not getattr(existing, name):
                    setattr(existing, name, incoming_value)
                    stats.fields_filled += 1
            index.register(existing)
        
        unique = self._deduplicate(merged, stats)
        
        logger.info(
            "merge_completed",
            input_records=stats.input_records,
            merged_records=len(unique),
            matched_records=stats.matched_records,
            fields_filled=stats.fields_filled,
            duplicates_removed=stats.duplicates_removed,
            indexed_keys=len(index),
        )
        return MergeResult(records=unique, stats=stats)
    
    def _assign_id(self, record: CanonicalRecord) -> str:
        """Reuse the id issued for this source row, or issue a fresh one."""
        if record.id:
            return record.id
        if record.source_ref is None:
            return self._id_factory()
        if record.source_ref not in self._issued_ids:
            self._issued_ids[record.source_ref] = self._id_factory()
        return self._issued_ids[record.source_ref]
    
    def _deduplicate(
        self,
        merged: List[CanonicalRecord],
        stats: MergeStats
    ) -> List[CanonicalRecord]:
        """Drop later records whose preferred key collides with an earlier one.
        
        Catches two records created independently that only turned out to
        share an identity after a later file filled in a key. Records with
        no key at all are kept.
        """
        seen = set()
        unique: List[CanonicalRecord] = []
        for record in merged:
            key = preferred_key(record)
            if key is not None and key in seen:
                stats.duplicates_removed += 1
                logger.debug("duplicate_record_dropped", key=key, record_id=record.id)
                continue
            if key is not None:
                seen.add(key)
            unique.append(record)
        return unique
