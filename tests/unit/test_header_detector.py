"""Tests for spreadsheet header row detection."""
import math

import pytest

from schedule_intake.errors.exceptions import FormatError
from schedule_intake.parsers.header_detector import (
    DetectorConfig,
    count_non_blank,
    find_header_row,
    header_labels,
    is_blank_row,
)


class TestCounting:
    
    def test_count_non_blank_ignores_whitespace_and_nan(self):
        assert count_non_blank(["a", " ", None, math.nan, 0]) == 2
    
    def test_is_blank_row(self):
        assert is_blank_row([None, "", "  "])
        assert not is_blank_row([None, "x"])


class TestFindHeaderRow:
    """Header search over non-blank rows."""
    
    def test_first_row_is_header(self):
        rows = [["Name", "Phone"], ["John", "4165551234"]]
        assert find_header_row(rows) == 0
    
    def test_title_rows_skipped(self):
        rows = [
            ["Downtown Clinic"],
            ["Printed 2025-01-14"],
            ["Name", "Phone", "Date"],
            ["John", "4165551234", "2025-01-15"],
        ]
        assert find_header_row(rows) == 2
    
    def test_min_header_cells_respected(self):
        rows = [["Clinic", "Report"], ["Name", "Phone", "Date"]]
        config = DetectorConfig(min_header_cells=3)
        assert find_header_row(rows, config) == 1
    
    def test_header_beyond_scan_window_fails(self):
        rows = [["Title"]] * 10 + [["Name", "Phone"]]
        
        with pytest.raises(FormatError) as exc_info:
            find_header_row(rows)
        
        assert "no header row found" in str(exc_info.value)
        assert exc_info.value.details["scanned_rows"] == 10
    
    def test_custom_scan_window(self):
        rows = [["Title"]] * 10 + [["Name", "Phone"]]
        assert find_header_row(rows, DetectorConfig(max_scan_rows=11)) == 10
    
    def test_empty_sheet_fails(self):
        with pytest.raises(FormatError):
            find_header_row([])


class TestHeaderLabels:
    
    def test_labels_trimmed(self):
        assert header_labels([" Name ", "Phone"]) == ["Name", "Phone"]
    
    def test_unlabeled_columns_get_placeholder(self):
        assert header_labels(["Name", None, "Date"]) == ["Name", "Unnamed: 1", "Date"]
