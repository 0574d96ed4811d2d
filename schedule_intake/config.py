"""Configuration management using pydantic-settings."""
import logging
import sys
from functools import lru_cache
from typing import Any, Literal

import structlog
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class IntakeSettings(BaseSettings):
    """Intake settings loaded from environment variables.
    
    All settings prefixed with INTAKE_ (e.g., INTAKE_HEADER_SCAN_ROWS=15)
    """
    
    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level"
    )
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment (production switches to JSON logs)"
    )
    
    # Spreadsheet header detection
    header_scan_rows: int = Field(
        default=10,
        ge=1,
        le=100,
        description="Number of non-blank leading rows searched for the header row"
    )
    min_header_cells: int = Field(
        default=2,
        ge=1,
        le=20,
        description="Minimum non-blank cells for a row to qualify as header"
    )
    
    # Upload limits
    max_file_size_mb: int = Field(
        default=50,
        ge=1,
        le=500,
        description="Maximum file size accepted by the upload loader (MB)"
    )
    
    # Commit payload
    default_appointment_time: str = Field(
        default="09:00 AM",
        min_length=1,
        description="Time used when a committed record has a day but no usable time"
    )
    
    model_config = SettingsConfigDict(
        env_prefix="INTAKE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )
    
    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"


@lru_cache
def get_settings() -> IntakeSettings:
    """Get cached intake settings."""
    return IntakeSettings()


def configure_logging(settings: IntakeSettings) -> None:
    """Configure structlog: JSON in production, console output otherwise."""
    log_level = getattr(logging, settings.log_level.upper(), logging.INFO)
    
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )
    
    shared_processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]
    
    if settings.is_production:
        processors = [
            *shared_processors,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=False),
        ]
    
    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


# Initialize logging on module import
configure_logging(get_settings())
