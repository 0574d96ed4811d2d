"""Tests for commit payload shaping."""
import pytest

from schedule_intake.models.canonical_record import CanonicalRecord
from schedule_intake.services.commit_payload import (
    build_commit_payload,
    build_commit_record,
    clean_time,
)

DEFAULT_TIME = "09:00 AM"


class TestCleanTime:
    
    @pytest.mark.parametrize("value,expected", [
        ("V04:45 PM", "04:45 PM"),
        ("@ 10:30", "10:30"),
        ("10:30 AM", "10:30 AM"),
        ("9:05", "9:05"),
        ("", DEFAULT_TIME),
        ("TBD", DEFAULT_TIME),
        ("1030", DEFAULT_TIME),
    ])
    def test_with_day(self, value, expected):
        assert clean_time(value, True, DEFAULT_TIME) == expected
    
    def test_without_day_no_default(self):
        assert clean_time("", False, DEFAULT_TIME) is None
        assert clean_time("V10:30", False, DEFAULT_TIME) == "10:30"


class TestBuildCommitRecord:
    
    def test_full_record(self):
        record = CanonicalRecord(
            id="r1",
            patient_name="John Doe",
            phone="4165551234",
            appointment_reason="Checkup",
            appointment_day="2025-01-15",
            appointment_time="10:30 AM",
            doctor_name="Dr. Smith",
            health_number="123",
        )
        
        payload = build_commit_record(record, DEFAULT_TIME)
        
        assert payload.patient_name == "John Doe"
        assert payload.phone == "4165551234"
        assert payload.doctor_name == "Dr. Smith"
        assert payload.appointment_day == "2025-01-15"
        assert payload.appointment_time == "2025-01-15 10:30 AM"
        assert payload.summary == "Checkup"
        assert payload.status == "pending"
    
    def test_blank_values_become_none(self):
        record = CanonicalRecord(
            patient_name="Ann Lee",
            phone="9055550000",
            appointment_reason="Flu",
            appointment_day="2025-01-15",
        )
        
        payload = build_commit_record(record, DEFAULT_TIME)
        
        assert payload.doctor_name is None
        assert payload.appointment_time == "2025-01-15 09:00 AM"
    
    def test_payload_preserves_order(self):
        records = [
            CanonicalRecord(patient_name=name, appointment_day="2025-01-15")
            for name in ("A", "B", "C")
        ]
        
        payload = build_commit_payload(records, DEFAULT_TIME)
        
        assert [p.patient_name for p in payload] == ["A", "B", "C"]
