"""Pytest configuration and shared fixtures.

Provides:
- Python path setup (so tests run without installing the package)
- Environment defaults for IntakeSettings
- Builders for in-memory CSV and XLSX uploads
"""
import io
import os
import sys
from pathlib import Path
from typing import Any, Callable, List, Sequence

import pytest

project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

os.environ.setdefault("INTAKE_LOG_LEVEL", "WARNING")

from openpyxl import Workbook  # noqa: E402

from schedule_intake.config import IntakeSettings  # noqa: E402
from schedule_intake.models.upload import Upload  # noqa: E402


def build_csv(header: Sequence[str], rows: Sequence[Sequence[Any]]) -> bytes:
    """Serialize header + rows as CSV bytes (no quoting needed for test data)."""
    lines = [",".join(header)]
    lines.extend(",".join("" if v is None else str(v) for v in row) for row in rows)
    return ("\n".join(lines) + "\n").encode("utf-8")


def build_xlsx(rows: Sequence[Sequence[Any]]) -> bytes:
    """Write rows into the first sheet of a new workbook; [] leaves a blank row."""
    wb = Workbook()
    ws = wb.active
    for row in rows:
        ws.append(list(row))
    buffer = io.BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def settings() -> IntakeSettings:
    """Default settings, independent of any .env file values under test."""
    return IntakeSettings(header_scan_rows=10, min_header_cells=2, default_appointment_time="09:00 AM")


@pytest.fixture
def csv_upload() -> Callable[..., Upload]:
    """Factory: csv_upload("a.csv", header, rows) -> Upload."""
    def _make(file_name: str, header: Sequence[str], rows: List[Sequence[Any]]) -> Upload:
        return Upload(file_name=file_name, content=build_csv(header, rows))
    return _make


@pytest.fixture
def xlsx_upload() -> Callable[..., Upload]:
    """Factory: xlsx_upload("a.xlsx", rows) -> Upload."""
    def _make(file_name: str, rows: List[Sequence[Any]]) -> Upload:
        return Upload(file_name=file_name, content=build_xlsx(rows))
    return _make
