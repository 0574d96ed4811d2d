"""CSV table reader implementation."""
import io
from typing import Any, Dict, List, Optional

import pandas as pd
import structlog

from schedule_intake.config import IntakeSettings
from schedule_intake.errors.exceptions import FormatError
from schedule_intake.parsers.base_parser import RawTable, TableReaderInterface
from schedule_intake.parsers.header_detector import is_blank_row

logger = structlog.get_logger(__name__)


class CsvTableReader(TableReaderInterface):
    """Reader for comma-separated schedule exports.
    
    The first row is always the header. Every cell is read as text so phone
    numbers and ids keep their leading zeros; fully blank rows are dropped.
    """
    
    def __init__(
        self,
        delimiter: str = ",",
        settings: Optional[IntakeSettings] = None
    ):
        super().__init__(settings)
        self.delimiter = delimiter
    
    def get_reader_name(self) -> str:
        """Return reader identifier."""
        return "csv"
    
    def read(self, content: bytes, file_name: str) -> RawTable:
        """Decode CSV bytes into header-keyed raw rows.
        
        Raises:
            FormatError: If the file is empty or not valid CSV
        """
        log = logger.bind(file_name=file_name)
        
        try:
            try:
                df = self._read_frame(content, encoding="utf-8-sig")
            except UnicodeDecodeError as e:
                log.warning("utf8_decode_failed_trying_latin1", error=str(e))
                df = self._read_frame(content, encoding="latin-1")
        except pd.errors.EmptyDataError as e:
            raise FormatError(f"{file_name}: CSV file is empty or contains no data") from e
        except pd.errors.ParserError as e:
            raise FormatError(f"{file_name}: CSV parsing error: {e}") from e
        
        columns = [str(c).strip() for c in df.columns]
        rows: List[Dict[str, Any]] = []
        for values in df.itertuples(index=False, name=None):
            if is_blank_row(values):
                continue
            rows.append(dict(zip(columns, values)))
        
        log.info("csv_read_completed", columns=len(columns), rows=len(rows))
        return RawTable(file_name=file_name, columns=columns, rows=rows, header_row_index=0)
    
    def _read_frame(self, content: bytes, encoding: str) -> pd.DataFrame:
        return pd.read_csv(
            io.BytesIO(content),
            delimiter=self.delimiter,
            encoding=encoding,
            header=0,
            dtype=str,  # keep leading zeros in phones and ids
            keep_default_na=False,
            skip_blank_lines=True,
            index_col=False,  # rows with a trailing delimiter keep their labels
        )
