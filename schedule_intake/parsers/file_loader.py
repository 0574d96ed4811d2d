"""Async loading of schedule files from disk into Upload models."""
import asyncio
from pathlib import Path
from typing import Optional, Union

import structlog

from schedule_intake.config import IntakeSettings, get_settings
from schedule_intake.errors.exceptions import FormatError
from schedule_intake.models.upload import Upload

logger = structlog.get_logger(__name__)


async def load_upload(
    path: Union[str, Path],
    extension: Optional[str] = None,
    settings: Optional[IntakeSettings] = None,
) -> Upload:
    """Read a file into an Upload without blocking the event loop.
    
    Args:
        path: File to read
        extension: Declared extension; defaults to the file suffix
        settings: Size limit source (defaults to get_settings())
    
    Returns:
        Upload ready for IngestSession.add_file()
    
    Raises:
        FormatError: If the file is missing or exceeds the size limit
    """
    settings = settings or get_settings()
    file_path = Path(path)
    log = logger.bind(file_path=str(file_path))
    
    if not file_path.is_file():
        raise FormatError(f"File not found: {file_path}")
    
    max_bytes = settings.max_file_size_mb * 1024 * 1024
    size = file_path.stat().st_size
    if size > max_bytes:
        raise FormatError(
            f"{file_path.name}: file size {size} bytes exceeds limit of "
            f"{settings.max_file_size_mb} MB",
            details={"size": size, "max_bytes": max_bytes},
        )
    
    content = await asyncio.to_thread(file_path.read_bytes)
    log.debug("upload_loaded", size=size)
    
    return Upload(file_name=file_path.name, content=content, extension=extension)
