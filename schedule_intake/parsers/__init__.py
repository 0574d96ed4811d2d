"""Table reader modules for uploaded schedule files."""
from schedule_intake.parsers.base_parser import RawTable, TableReaderInterface
from schedule_intake.parsers.parser_registry import (
    register_reader,
    get_reader,
    create_reader_instance,
    list_registered_extensions,
)
from schedule_intake.parsers.csv_parser import CsvTableReader
from schedule_intake.parsers.excel_parser import ExcelTableReader
from schedule_intake.parsers.file_loader import load_upload

# Register readers
register_reader("csv", CsvTableReader)
register_reader("xlsx", ExcelTableReader, extension="xlsx")
register_reader("xls", ExcelTableReader, extension="xls")

__all__ = [
    "RawTable",
    "TableReaderInterface",
    "register_reader",
    "get_reader",
    "create_reader_instance",
    "list_registered_extensions",
    "CsvTableReader",
    "ExcelTableReader",
    "load_upload",
]
