"""Tests for identity keys, KeyIndex and MergeEngine."""
from itertools import count

import pytest

from schedule_intake.models.canonical_record import CanonicalRecord
from schedule_intake.services.merge_engine import (
    KeyIndex,
    MergeEngine,
    key_candidates,
    preferred_key,
)


def record(**fields) -> CanonicalRecord:
    return CanonicalRecord(**fields)


@pytest.fixture
def engine():
    """Engine with predictable ids."""
    counter = count(1)
    return MergeEngine(id_factory=lambda: f"rec-{next(counter)}")


class TestKeys:
    """Identity key derivation."""
    
    def test_all_keys_in_priority_order(self):
        r = record(
            insurance_number="77",
            phone="4165551234",
            health_number="123",
            patient_name="John Doe",
        )
        assert key_candidates(r) == [
            "ins:77", "phone:4165551234", "health:123", "name:johndoe",
        ]
    
    def test_blank_fields_yield_no_keys(self):
        assert key_candidates(record()) == []
        assert preferred_key(record()) is None
    
    def test_keys_are_typed(self):
        assert key_candidates(record(phone="1234567890")) != key_candidates(
            record(health_number="1234567890")
        )
    
    def test_preferred_key_skips_health_number(self):
        assert preferred_key(record(health_number="123", patient_name="Ann Lee")) == "name:annlee"
        assert preferred_key(record(phone="4165551234", patient_name="Ann Lee")) == "phone:4165551234"


class TestKeyIndex:
    
    def test_find_and_register(self):
        index = KeyIndex()
        owner = record(phone="4165551234", patient_name="John Doe")
        
        assert index.find(owner) is None
        assert index.register(owner) == 2
        assert "phone:4165551234" in index
        assert index.find(record(patient_name="JOHN DOE")) is owner
    
    def test_first_claim_kept(self):
        index = KeyIndex()
        first = record(patient_name="Ann Lee")
        second = record(patient_name="Ann Lee", phone="9055550000")
        index.register(first)
        
        assert index.register(second) == 1
        assert index.find(record(patient_name="Ann Lee")) is first
        assert len(index) == 2


class TestMerge:
    """MergeEngine.merge behaviour."""
    
    def test_blanks_filled_from_later_records(self, engine):
        result = engine.merge([
            record(patient_name="John Doe", phone="4165551234", appointment_day="2025-01-15"),
            record(phone="4165551234", appointment_reason="Checkup", doctor_name="Dr. Smith"),
        ])
        
        assert len(result.records) == 1
        merged = result.records[0]
        assert merged.patient_name == "John Doe"
        assert merged.appointment_reason == "Checkup"
        assert merged.doctor_name == "Dr. Smith"
        assert result.stats.matched_records == 1
        assert result.stats.fields_filled == 2
    
    def test_first_populated_value_wins(self, engine):
        result = engine.merge([
            record(phone="4165551234", appointment_reason="Checkup"),
            record(phone="4165551234", appointment_reason="Follow-up"),
        ])
        
        assert result.records[0].appointment_reason == "Checkup"
    
    def test_identical_files_do_not_duplicate(self, engine):
        rows = [
            record(patient_name="John Doe", phone="4165551234"),
            record(patient_name="Ann Lee", phone="9055550000"),
        ]
        
        result = engine.merge(rows + [r.model_copy() for r in rows])
        
        assert len(result.records) == 2
        assert result.stats.matched_records == 2
        assert result.stats.fields_filled == 0
    
    def test_input_not_mutated(self, engine):
        first = record(phone="4165551234")
        second = record(phone="4165551234", patient_name="John Doe")
        
        engine.merge([first, second])
        
        assert first.patient_name == ""
        assert first.id is None
    
    def test_key_learned_from_later_record(self, engine):
        result = engine.merge([
            record(phone="4165551234"),
            record(phone="4165551234", health_number="555"),
            record(health_number="555", appointment_reason="Flu"),
        ])
        
        assert len(result.records) == 1
        assert result.records[0].appointment_reason == "Flu"
    
    def test_late_duplicate_removed(self, engine):
        result = engine.merge([
            record(health_number="111", appointment_day="2025-01-15"),
            record(patient_name="Ann Lee", appointment_reason="Flu"),
            record(health_number="111", patient_name="Ann Lee"),
        ])
        
        assert len(result.records) == 1
        survivor = result.records[0]
        assert survivor.health_number == "111"
        assert survivor.patient_name == "Ann Lee"
        assert survivor.appointment_reason == ""
        assert result.stats.duplicates_removed == 1
        assert result.stats.merged_records == 1
    
    def test_same_name_different_phone_merges(self, engine):
        result = engine.merge([
            record(patient_name="John Smith", phone="4165551234"),
            record(patient_name="John Smith", phone="9055550000", doctor_name="Dr. Wu"),
        ])
        
        assert len(result.records) == 1
        assert result.records[0].phone == "4165551234"
        assert result.records[0].doctor_name == "Dr. Wu"
    
    def test_disjoint_keys_not_merged(self, engine):
        result = engine.merge([
            record(patient_name="John Doe", phone="4165551234"),
            record(patient_name="Ann Lee", phone="9055550000"),
        ])
        
        assert [r.patient_name for r in result.records] == ["John Doe", "Ann Lee"]
    
    def test_keyless_records_kept(self, engine):
        result = engine.merge([
            record(appointment_reason="Checkup"),
            record(appointment_reason="Checkup"),
        ])
        
        assert len(result.records) == 2
        assert result.stats.duplicates_removed == 0
    
    def test_empty_input(self, engine):
        result = engine.merge([])
        assert result.records == []
        assert result.stats.input_records == 0


class TestPatches:
    """Manual field values supplied to merge by record id."""
    
    def test_patched_key_used_for_matching(self, engine):
        rows = [
            record(patient_name="John Doe", source_ref="0:0"),
            record(phone="4165551234", doctor_name="Dr Wu", source_ref="1:0"),
        ]
        first_id = engine.merge(rows[:1]).records[0].id
        
        result = engine.merge(rows, patches={first_id: {"phone": "4165551234"}})
        
        assert len(result.records) == 1
        assert result.records[0].id == first_id
        assert result.records[0].doctor_name == "Dr Wu"
    
    def test_patch_wins_over_row_value(self, engine):
        row = record(phone="4165551234", appointment_reason="Checkup", source_ref="0:0")
        record_id = engine.merge([row]).records[0].id
        
        result = engine.merge(
            [row, record(phone="4165551234", appointment_reason="Flu", source_ref="1:0")],
            patches={record_id: {"appointment_reason": "Follow-up"}},
        )
        
        assert result.records[0].appointment_reason == "Follow-up"
    
    def test_patches_do_not_mutate_input(self, engine):
        row = record(patient_name="John Doe", source_ref="0:0")
        record_id = engine.merge([row]).records[0].id
        
        engine.merge([row], patches={record_id: {"phone": "4165551234"}})
        
        assert row.phone == ""


class TestIds:
    """Id assignment."""
    
    def test_ids_from_factory(self, engine):
        result = engine.merge([record(phone="4165551234"), record(phone="9055550000")])
        assert [r.id for r in result.records] == ["rec-1", "rec-2"]
    
    def test_ids_stable_across_passes(self, engine):
        rows = [
            record(phone="4165551234", source_ref="0:0"),
            record(phone="9055550000", source_ref="0:1"),
        ]
        first = engine.merge(rows)
        second = engine.merge(rows + [record(phone="6475550000", source_ref="1:0")])
        
        assert [r.id for r in second.records][:2] == [r.id for r in first.records]
        assert second.records[2].id == "rec-3"
    
    def test_existing_id_kept(self, engine):
        result = engine.merge([record(id="fixed", phone="4165551234")])
        assert result.records[0].id == "fixed"
    
    def test_reset_forgets_ids(self, engine):
        rows = [record(phone="4165551234", source_ref="0:0")]
        before = engine.merge(rows).records[0].id
        
        engine.reset()
        after = engine.merge(rows).records[0].id
        
        assert before != after
    
    def test_default_ids_are_unique(self):
        result = MergeEngine().merge([record(phone="4165551234"), record(phone="9055550000")])
        ids = [r.id for r in result.records]
        assert all(ids)
        assert len(set(ids)) == 2
