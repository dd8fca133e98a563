import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .assets import DEFAULT_STATIC_DIR

LOG_LEVELS = ("critical", "error", "warning", "info", "debug", "trace")


class Settings(BaseModel):
    host: str = "0.0.0.0"
    port: int = Field(5000, ge=1, le=65535)
    log_level: str = "info"
    static_dir: Path = DEFAULT_STATIC_DIR
    seed: Optional[int] = None
    access_log: bool = True

    @field_validator("log_level")
    @classmethod
    def known_log_level(cls, value: str) -> str:
        value = value.lower()
        if value not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return value

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from HOST, PORT, LOG_LEVEL, STATIC_DIR, SEED and ACCESS_LOG."""
        values = {
            "host": os.getenv("HOST"),
            "port": os.getenv("PORT"),
            "log_level": os.getenv("LOG_LEVEL"),
            "static_dir": os.getenv("STATIC_DIR"),
            "seed": os.getenv("SEED"),
            "access_log": os.getenv("ACCESS_LOG"),
        }
        return cls(**{k: v for k, v in values.items() if v not in (None, "")})
