"""Jolokia-backed implementation of the management-protocol capability.

Jolokia exposes JMX over HTTP/JSON. Every operation is a POST of a JSON
request to the agent endpoint; the response carries a Jolokia ``status`` that
is checked independently of the HTTP status.
"""

import logging
from types import TracebackType
from typing import Any, Self

import httpx

from ..config import CollectorSettings
from ..errors import AttributeReadError, EndpointConnectionError, ManagementProtocolError, ObjectResolutionError
from ..models.records import Credentials
from ..models.values import MetricValue, from_json

logger = logging.getLogger("snc_jmx_collector.client.jolokia")

# Jolokia response status codes
JOLOKIA_OK = 200


def escape_path_segment(segment: str) -> str:
    """Escape a segment for use in a Jolokia ``list`` path."""
    return segment.replace("!", "!!").replace("/", "!/")


def build_list_path(object_name: str) -> str:
    """Build the ``list`` path addressing one MBean: ``<domain>/<key properties>``."""
    domain, _, properties = object_name.partition(":")
    return f"{escape_path_segment(domain)}/{escape_path_segment(properties)}"


class JolokiaSession:
    """An HTTP session bound to one Jolokia agent."""

    def __init__(self, http_client: httpx.AsyncClient, endpoint_url: str) -> None:
        """Initialize the session.

        Args:
            http_client: The configured httpx client, owned by this session.
            endpoint_url: Absolute URL of the Jolokia agent.

        """
        self._http_client = http_client
        self._endpoint_url = endpoint_url

    async def __aenter__(self) -> Self:
        """Return the session for ``async with`` usage."""
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Close the session when leaving an ``async with`` block."""
        await self.close()

    @property
    def endpoint_url(self) -> str:
        """Return the agent URL."""
        return self._endpoint_url

    async def request(self, payload: dict[str, Any]) -> Any:
        """Send one Jolokia request and return its ``value``.

        Raises:
            ManagementProtocolError: On network errors, invalid JSON or a non-200 Jolokia status.

        """
        try:
            resp = await self._http_client.post(self._endpoint_url, json=payload)
            resp.raise_for_status()
        except httpx.HTTPError as exc:
            msg = f"Network error during Jolokia {payload.get('type')} request to {self._endpoint_url}: {exc}"
            raise ManagementProtocolError(msg) from exc

        try:
            data = resp.json()
        except ValueError as exc:
            msg = f"Invalid JSON response from {self._endpoint_url}: {exc}"
            raise ManagementProtocolError(msg) from exc

        if not isinstance(data, dict):
            msg = f"Unexpected Jolokia response from {self._endpoint_url}: {type(data).__name__} instead of an object"
            raise ManagementProtocolError(msg)

        status = data.get("status")
        if status != JOLOKIA_OK:
            error = data.get("error") or data.get("error_type") or "unknown error"
            msg = f"Jolokia {payload.get('type')} request failed with status {status}: {error}"
            raise ManagementProtocolError(msg)
        return data.get("value")

    async def query_names(self, pattern: str) -> list[str]:
        """Return the object names matching ``pattern`` (``search`` request)."""
        try:
            value = await self.request({"type": "search", "mbean": pattern})
        except ManagementProtocolError as exc:
            msg = f"Unable to resolve object name {pattern}: {exc}"
            raise ObjectResolutionError(msg) from exc
        return [str(name) for name in value or []]

    async def list_attributes(self, object_name: str) -> list[str]:
        """Return the attribute names of ``object_name`` (``list`` request)."""
        value = await self.request({"type": "list", "path": build_list_path(object_name)})
        if value is None:
            return []
        if not isinstance(value, dict):
            msg = f"Unexpected Jolokia list value for {object_name}: {type(value).__name__}"
            raise ManagementProtocolError(msg)
        attributes = value.get("attr") or {}
        return list(attributes)

    async def read_attribute(self, object_name: str, attribute: str) -> MetricValue:
        """Read one attribute (``read`` request)."""
        try:
            value = await self.request({"type": "read", "mbean": object_name, "attribute": attribute})
        except ManagementProtocolError as exc:
            msg = f"Unable to read {attribute} on {object_name}: {exc}"
            raise AttributeReadError(msg) from exc
        return from_json(value)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._http_client.aclose()


class JolokiaClient:
    """Open ``JolokiaSession`` instances with shared HTTP settings."""

    def __init__(self, settings: CollectorSettings) -> None:
        """Initialize the client.

        Args:
            settings: Collector settings providing scheme, agent path, TLS verification and timeouts.

        """
        self._settings = settings

    def endpoint_url(self, host: str, port: int) -> str:
        """Return the agent URL for ``host:port``."""
        path = "/" + self._settings.jolokia_path.strip("/")
        return f"{self._settings.jolokia_scheme}://{host}:{port}{path}"

    async def connect(self, host: str, port: int, credentials: Credentials | None = None) -> JolokiaSession:
        """Open a session and check that the agent answers.

        Raises:
            EndpointConnectionError: If the agent is unreachable or rejects the credentials.

        """
        auth = httpx.BasicAuth(credentials.username, credentials.password) if credentials else None
        timeout = httpx.Timeout(self._settings.timeout_s)
        http_client = httpx.AsyncClient(verify=self._settings.verify_ssl, timeout=timeout, auth=auth)
        session = JolokiaSession(http_client, self.endpoint_url(host, port))
        try:
            version = await session.request({"type": "version"})
        except ManagementProtocolError as exc:
            await session.close()
            msg = f"Unable to connect to Jolokia agent at {session.endpoint_url}: {exc}"
            raise EndpointConnectionError(msg) from exc
        except BaseException:
            # Cancelled by a caller timeout: close the HTTP client before unwinding.
            await session.close()
            raise

        agent = version.get("agent") if isinstance(version, dict) else None
        logger.debug("Connected to Jolokia agent %s at %s", agent, session.endpoint_url)
        return session


__all__ = ["JOLOKIA_OK", "JolokiaClient", "JolokiaSession", "build_list_path", "escape_path_segment"]
