"""Abstract table reader interface for pluggable file formats."""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from schedule_intake.config import IntakeSettings, get_settings
from schedule_intake.services.normalize import norm_key


@dataclass
class RawTable:
    """Rows decoded from one file, keyed by the labels of its header row."""
    file_name: str
    columns: List[str]
    rows: List[Dict[str, Any]] = field(default_factory=list)
    header_row_index: int = 0
    
    @property
    def columns_present(self) -> List[str]:
        """Header labels after normalization, kept for audit."""
        return [norm_key(label) for label in self.columns]


class TableReaderInterface(ABC):
    """Abstract base class for all tabular file readers.
    
    Implementations must provide:
    - read(): Decode file bytes into header-keyed raw rows
    - get_reader_name(): Return unique reader identifier
    """
    
    def __init__(self, settings: Optional[IntakeSettings] = None):
        self.settings = settings or get_settings()
    
    @abstractmethod
    def read(self, content: bytes, file_name: str) -> RawTable:
        """Decode file content into raw rows.
        
        Args:
            content: Raw file bytes
            file_name: Original file name (used for messages and extension hints)
        
        Returns:
            RawTable with header labels and one dict per non-blank body row
        
        Raises:
            FormatError: If the file cannot be decoded or has no header row
        """
        pass
    
    @abstractmethod
    def get_reader_name(self) -> str:
        """Return unique identifier for this reader type (e.g. "csv", "excel")."""
        pass
