"""Pydantic models for validated endpoint configuration.

A config document describes one monitored JVM: where to reach it, how to
prefix its metrics and which MBeans to query. Documents are shape-checked by
``operations.validation`` before they are turned into these models.
"""

from pydantic import BaseModel, ConfigDict, Field


class Credentials(BaseModel):
    """Username and password used to open an authenticated session."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str = Field(repr=False)


class QuerySpec(BaseModel):
    """One MBean request within a config document."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    object_pattern: str = Field(alias="object_name")
    """Object name of the MBean to request, possibly containing ``*`` wildcards."""

    object_alias: str | None = None
    """Replacement for the object name in metric paths; may contain ``${key}`` placeholders."""

    attributes: tuple[str, ...] | None = None
    """Attributes to read. When unset, every attribute exposed by the MBean is read."""


class ConfigRecord(BaseModel):
    """A validated description of one monitored endpoint."""

    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    host: str
    port: int
    credentials: Credentials | None = None
    metric_alias: str | None = Field(default=None, alias="alias")
    """Prefix used in emitted metric paths."""

    queries: tuple[QuerySpec, ...] = Field(min_length=1)
    source: str = ""
    """Path of the config file this record was loaded from."""

    @property
    def base_path(self) -> str:
        """Return the metric path prefix: the alias, or ``<host>_<port>``."""
        if self.metric_alias is not None:
            return self.metric_alias
        return f"{self.host}_{self.port}"

    @property
    def endpoint(self) -> str:
        """Return ``host:port`` for log messages."""
        return f"{self.host}:{self.port}"


__all__ = ["ConfigRecord", "Credentials", "QuerySpec"]
