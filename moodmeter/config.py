"""
Runtime configuration for the Mood Meter service.

Settings are read from ``MOODMETER_*`` environment variables (or a ``.env``
file) once at startup and passed explicitly to the application factory.
"""

import logging
import sys

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service settings."""

    model_config = SettingsConfigDict(
        env_prefix="MOODMETER_", env_file=".env", extra="ignore"
    )

    liff_id: str | None = Field(
        None, description="LINE LIFF app id used by the result page login flow"
    )
    collection: str = Field("moods", description="Name of the mood collection")
    host: str = Field("0.0.0.0", description="Host to bind the server to")
    port: int = Field(8000, ge=1, le=65535, description="Port to bind the server to")
    log_level: str = Field("info", description="Logging level name")
    reload: bool = Field(False, description="Enable uvicorn auto-reload")


def configure_logging(level: str = "info") -> None:
    """Configure root logging for the server process."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
