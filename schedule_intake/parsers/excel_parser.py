"""Excel table reader with header row detection.

Reads the first worksheet of .xlsx (openpyxl) and .xls (xlrd) workbooks,
locates the real header row below any title/preamble rows, and pairs each
body row with the header labels by column position.
"""
import io
from typing import Any, Dict, List, Optional

import pandas as pd
import structlog

from schedule_intake.config import IntakeSettings
from schedule_intake.errors.exceptions import FormatError
from schedule_intake.parsers.base_parser import RawTable, TableReaderInterface
from schedule_intake.parsers.header_detector import (
    DetectorConfig,
    find_header_row,
    header_labels,
    is_blank_row,
)

logger = structlog.get_logger(__name__)

ENGINES = {
    "xlsx": "openpyxl",
    "xlsm": "openpyxl",
    "xls": "xlrd",
}


class ExcelTableReader(TableReaderInterface):
    """Reader for spreadsheet schedule exports."""
    
    def __init__(
        self,
        extension: str = "xlsx",
        settings: Optional[IntakeSettings] = None
    ):
        super().__init__(settings)
        self.extension = extension.lower().lstrip(".")
        self._detector_config = DetectorConfig(
            min_header_cells=self.settings.min_header_cells,
            max_scan_rows=self.settings.header_scan_rows,
        )
    
    def get_reader_name(self) -> str:
        """Return reader identifier."""
        return "excel"
    
    def read(self, content: bytes, file_name: str) -> RawTable:
        """Decode the first worksheet into header-keyed raw rows.
        
        Raises:
            FormatError: If the workbook cannot be opened or no header row
                is found within the scanned rows
        """
        log = logger.bind(file_name=file_name, extension=self.extension)
        engine = ENGINES.get(self.extension, "openpyxl")
        
        try:
            df = pd.read_excel(
                io.BytesIO(content),
                sheet_name=0,
                header=None,
                dtype=object,  # keep ints, datetimes and text as the workbook has them
                engine=engine,
            )
        except Exception as e:
            raise FormatError(f"{file_name}: unable to read workbook: {e}") from e
        
        # Fully blank rows never count towards the header scan
        sheet_rows = [list(r) for r in df.itertuples(index=False, name=None)]
        sheet_rows = [r for r in sheet_rows if not is_blank_row(r)]
        
        try:
            header_idx = find_header_row(sheet_rows, self._detector_config)
        except FormatError as e:
            raise FormatError(f"{file_name}: {e.message}", details=e.details) from e
        
        columns = header_labels(sheet_rows[header_idx])
        rows: List[Dict[str, Any]] = []
        for body in sheet_rows[header_idx + 1:]:
            rows.append(
                {label: (body[i] if i < len(body) else "") for i, label in enumerate(columns)}
            )
        
        log.info(
            "excel_read_completed",
            header_row=header_idx,
            columns=len(columns),
            rows=len(rows),
        )
        return RawTable(
            file_name=file_name,
            columns=columns,
            rows=rows,
            header_row_index=header_idx,
        )
