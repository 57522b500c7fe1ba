"""Configuration management for the JMX collector.

This module defines the ``CollectorSettings`` model and helpers to load the
scheduling and transport settings from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

# Load variables from a local .env file for development convenience
load_dotenv()


class CollectorSettings(BaseModel):
    """Settings that drive the collection loop."""

    path: Path
    """Directory holding one JSON config document per monitored JVM."""

    polling_frequency: int = Field(default=60, ge=1)
    """Interval between two collection cycles, in seconds."""

    nb_thread: int = Field(default=4, ge=1, le=256)
    """Number of collector workers polling endpoints concurrently."""

    event_type: str = "jmx"
    timeout_ms: int = Field(default=10000, ge=1000, le=600000)
    verify_ssl: bool = True
    jolokia_scheme: Literal["http", "https"] = "http"
    jolokia_path: str = "/jolokia"
    queue_maxsize: int = Field(default=0, ge=0)
    """Upper bound of the work queue; 0 means unbounded."""

    drain_poll_interval: float = Field(default=1.0, gt=0)
    """Cadence at which the scheduler checks whether the work queue is drained."""

    @field_validator("path")
    @classmethod
    def _validate_path(cls, value: Path) -> Path:
        if not value.is_dir():
            msg = f"Config path {value} is not a readable directory."
            raise ValueError(msg)
        return value

    @property
    def timeout_s(self) -> float:
        """Return the per-operation network timeout in seconds."""
        return self.timeout_ms / 1000

    @classmethod
    def from_env(cls) -> CollectorSettings:
        """Build the settings from environment variables."""
        conf_path = os.getenv("JMX_CONF_PATH")
        if not conf_path:
            msg = "JMX_CONF_PATH is required to locate the JMX config documents."
            raise RuntimeError(msg)
        raw_config: dict[str, Any] = {
            "path": conf_path,
            "polling_frequency": os.getenv("JMX_POLLING_FREQUENCY"),
            "nb_thread": os.getenv("JMX_NB_THREAD"),
            "event_type": os.getenv("JMX_EVENT_TYPE"),
            "timeout_ms": os.getenv("JMX_TIMEOUT_MS"),
            "verify_ssl": os.getenv("JMX_VERIFY_SSL"),
            "jolokia_scheme": os.getenv("JMX_JOLOKIA_SCHEME"),
            "jolokia_path": os.getenv("JMX_JOLOKIA_PATH"),
            "queue_maxsize": os.getenv("JMX_QUEUE_MAXSIZE"),
            "drain_poll_interval": os.getenv("JMX_DRAIN_POLL_INTERVAL"),
        }
        # Unset variables fall back to the model defaults
        raw_config = {key: value for key, value in raw_config.items() if value is not None}
        try:
            return cls(**raw_config)
        except ValidationError as exc:
            messages = "; ".join(err["msg"] for err in exc.errors())
            msg = f"Invalid JMX collector configuration: {messages}"
            raise RuntimeError(msg) from exc


__all__ = ["CollectorSettings"]
