"""Interfaces of the management-protocol capability consumed by the collector."""

from typing import Protocol

from ..models.records import Credentials
from ..models.values import MetricValue


class ManagementSession(Protocol):
    """An open session to one management endpoint."""

    async def query_names(self, pattern: str) -> list[str]:
        """Return the object names matching an exact or wildcard pattern."""
        ...

    async def list_attributes(self, object_name: str) -> list[str]:
        """Return the names of every readable attribute of an object."""
        ...

    async def read_attribute(self, object_name: str, attribute: str) -> MetricValue:
        """Read one attribute value."""
        ...

    async def close(self) -> None:
        """Release the session."""
        ...


class ManagementClient(Protocol):
    """Factory for management sessions."""

    async def connect(self, host: str, port: int, credentials: Credentials | None = None) -> ManagementSession:
        """Open a session, authenticating when credentials are given.

        Raises:
            EndpointConnectionError: If the endpoint is unreachable or rejects the credentials.

        """
        ...


__all__ = ["ManagementClient", "ManagementSession"]
