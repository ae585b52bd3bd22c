"""Environment configuration management."""

import os
from pathlib import Path

from dotenv import dotenv_values, find_dotenv
from loguru import logger
from pydantic import BaseModel, Field, field_validator

DEFAULT_REPO = "https://github.com/dharnnie/claude-cortex.git"
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
TRUTHY = ("true", "1", "yes")


class CortexSettings(BaseModel):
    """Settings read from the environment (and a local .env file)."""

    repo: str = Field(DEFAULT_REPO, description="Default rules source: git URL or local directory")
    log_level: str = Field("INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
    debug: bool = Field(False, description="Also log to CORTEX_LOG_FILE")
    log_file: Path = Field(Path("cortex.log"), description="Log file used in debug mode")
    home: Path = Field(default_factory=Path.home, description="Home directory for --global installs")

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = str(value or "INFO").upper()
        return level if level in VALID_LOG_LEVELS else "INFO"

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "CortexSettings":
        """Build settings from ``environ``.

        Defaults to the process environment layered over a .env file found from
        the working directory upwards; real environment variables win.
        """
        if environ is None:
            dotenv = {key: value for key, value in dotenv_values(find_dotenv(usecwd=True)).items() if value is not None}
            environ = {**dotenv, **os.environ}

        values: dict[str, object] = {}
        if environ.get("CORTEX_REPO"):
            values["repo"] = environ["CORTEX_REPO"]
        if environ.get("CORTEX_LOG_LEVEL"):
            if environ["CORTEX_LOG_LEVEL"].upper() not in VALID_LOG_LEVELS:
                logger.warning(f"Invalid log level: {environ['CORTEX_LOG_LEVEL']}. Using INFO.")
            values["log_level"] = environ["CORTEX_LOG_LEVEL"]
        if environ.get("CORTEX_LOG_FILE"):
            values["log_file"] = Path(environ["CORTEX_LOG_FILE"])
        if environ.get("CORTEX_HOME"):
            values["home"] = Path(environ["CORTEX_HOME"]).expanduser()
        values["debug"] = environ.get("CORTEX_DEBUG", "").lower() in TRUTHY
        return cls(**values)


_settings: CortexSettings | None = None


def get_settings() -> CortexSettings:
    """Get the singleton settings instance."""
    global _settings
    if _settings is None:
        _settings = CortexSettings.from_env()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None
