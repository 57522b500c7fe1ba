"""The metric event handed to the downstream pipeline."""

from datetime import UTC, datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator


class MetricEvent(BaseModel):
    """One metric reading.

    Exactly one of ``metric_value_number`` and ``metric_value_string`` is set.
    Events are immutable once built.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    host: str
    path: str
    """Config directory the endpoint definition was loaded from."""

    type: str
    metric_path: str
    metric_value_number: int | float | None = None
    metric_value_string: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC), alias="@timestamp")
    version: str = Field(default="1", alias="@version")

    @model_validator(mode="after")
    def _validate_single_value(self) -> Self:
        has_number = self.metric_value_number is not None
        has_string = self.metric_value_string is not None
        if has_number == has_string:
            msg = "Exactly one of metric_value_number and metric_value_string must be set."
            raise ValueError(msg)
        return self

    def to_document(self) -> dict[str, Any]:
        """Return the JSON-compatible event document, without the unset value field."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


__all__ = ["MetricEvent"]
