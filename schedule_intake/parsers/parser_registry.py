"""Reader registry mapping file extensions to table readers."""
from typing import Any, Dict, Optional, Tuple, Type

from schedule_intake.errors.exceptions import FormatError
from schedule_intake.parsers.base_parser import TableReaderInterface


# Extension -> (reader class, default constructor kwargs); filled at import time only
_reader_registry: Dict[str, Tuple[Type[TableReaderInterface], Dict[str, Any]]] = {}


def register_reader(
    extension: str,
    reader_class: Type[TableReaderInterface],
    /,
    **defaults: Any
) -> None:
    """Register a reader class for a file extension.
    
    Args:
        extension: File extension without dot (e.g., "csv", "xlsx")
        reader_class: Reader class that inherits from TableReaderInterface
        **defaults: Constructor kwargs used for this extension
    
    Raises:
        ValueError: If extension is already registered
        TypeError: If reader_class does not inherit from TableReaderInterface
    """
    if not issubclass(reader_class, TableReaderInterface):
        raise TypeError(
            f"Reader class {reader_class.__name__} must inherit from TableReaderInterface"
        )
    
    key = extension.lower().lstrip(".")
    if key in _reader_registry:
        raise ValueError(
            f"Extension '{key}' is already registered. "
            f"Existing: {_reader_registry[key][0].__name__}"
        )
    
    _reader_registry[key] = (reader_class, dict(defaults))


def get_reader(extension: str) -> Optional[Type[TableReaderInterface]]:
    """Get reader class for an extension, or None."""
    entry = _reader_registry.get(extension.lower().lstrip("."))
    return entry[0] if entry else None


def create_reader_instance(extension: str, /, **kwargs: Any) -> TableReaderInterface:
    """Create a reader for a file extension.
    
    Raises:
        FormatError: If no reader is registered for the extension
    """
    key = extension.lower().lstrip(".")
    entry = _reader_registry.get(key)
    if entry is None:
        available = ", ".join(sorted(_reader_registry)) if _reader_registry else "none"
        raise FormatError(
            f"Unsupported file type '{extension or '(none)'}'. "
            f"Supported types: {available}"
        )
    
    reader_class, defaults = entry
    return reader_class(**{**defaults, **kwargs})


def list_registered_extensions() -> list[str]:
    """List all registered file extensions."""
    return list(_reader_registry.keys())
