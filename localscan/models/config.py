"""Scan configuration using Pydantic for validation."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..exceptions import ConfigurationError

DEFAULT_HISTORY_PATH = Path.home() / ".localscan" / "last.json"


class ScanConfig(BaseModel):
    """Settings for a single scan invocation."""

    interface: str | None = None
    timeout_ms: int = Field(default=500, gt=0, le=60_000)
    workers: int = Field(default=100, ge=1, le=4096)
    output_format: Literal["table", "json", "csv"] = "table"
    output: Path | None = None
    diff: bool = False
    history_path: Path = DEFAULT_HISTORY_PATH
    dns_timeout_seconds: float = Field(default=1.0, gt=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"

    @field_validator("interface")
    @classmethod
    def blank_interface(cls, v: str | None) -> str | None:
        """Treat an empty interface name as auto-detect."""
        if v is not None and not v.strip():
            return None
        return v

    @property
    def timeout(self) -> float:
        """Per-probe timeout in seconds."""
        return self.timeout_ms / 1000.0

    @classmethod
    def from_args(cls, **kwargs) -> "ScanConfig":
        """Validate raw CLI values, raising ConfigurationError on failure."""
        try:
            return cls.model_validate(kwargs)
        except ValidationError as e:
            messages = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
            )
            raise ConfigurationError(f"Invalid configuration: {messages}") from e
