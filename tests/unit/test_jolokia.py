"""Unit tests for the Jolokia management client."""

import asyncio
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from snc_jmx_collector.client.jolokia import (
    JolokiaClient,
    JolokiaSession,
    build_list_path,
    escape_path_segment,
)
from snc_jmx_collector.config import CollectorSettings
from snc_jmx_collector.errors import (
    AttributeReadError,
    EndpointConnectionError,
    ManagementProtocolError,
    ObjectResolutionError,
)
from snc_jmx_collector.models.records import Credentials
from snc_jmx_collector.models.values import Composite, Numeric

ENDPOINT = "http://jvm.example.com:8778/jolokia"


def _response(payload: Any) -> MagicMock:
    resp = MagicMock(spec=httpx.Response)
    resp.json.return_value = payload
    resp.raise_for_status.return_value = resp
    return resp


def _session(payload: Any) -> tuple[JolokiaSession, MagicMock]:
    http_client = MagicMock(spec=httpx.AsyncClient)
    http_client.post = AsyncMock(return_value=_response(payload))
    http_client.aclose = AsyncMock()
    return JolokiaSession(http_client, ENDPOINT), http_client


class TestPathHelpers:
    """Tests for list path escaping."""

    def test_escape_path_segment(self) -> None:
        """Slashes and exclamation marks are escaped with '!'."""
        assert escape_path_segment("a/b!c") == "a!/b!!c"

    def test_build_list_path(self) -> None:
        """The list path joins the domain and the key properties."""
        assert build_list_path("java.lang:type=Memory") == "java.lang/type=Memory"
        assert build_list_path("app:name=/tmp/x") == "app/name=!/tmp!/x"


class TestJolokiaSession:
    """Tests for JolokiaSession requests."""

    @pytest.mark.asyncio
    async def test_request_returns_value(self) -> None:
        """Successful requests return the Jolokia value."""
        session, http_client = _session({"status": 200, "value": {"agent": "2.0.0"}})

        value = await session.request({"type": "version"})

        assert value == {"agent": "2.0.0"}
        http_client.post.assert_awaited_once_with(ENDPOINT, json={"type": "version"})

    @pytest.mark.asyncio
    async def test_request_jolokia_error_status(self) -> None:
        """A non-200 Jolokia status raises even when HTTP succeeded."""
        session, _ = _session({"status": 404, "error": "javax.management.InstanceNotFoundException: a:b=c"})

        with pytest.raises(ManagementProtocolError, match="status 404: javax.management.InstanceNotFoundException"):
            await session.request({"type": "read", "mbean": "a:b=c", "attribute": "X"})

    @pytest.mark.asyncio
    async def test_request_network_error(self) -> None:
        """Network errors are wrapped in ManagementProtocolError."""
        session, http_client = _session({})
        http_client.post = AsyncMock(side_effect=httpx.ConnectError("Connection refused"))

        with pytest.raises(ManagementProtocolError, match="Network error during Jolokia search request"):
            await session.request({"type": "search", "mbean": "*:*"})

    @pytest.mark.asyncio
    async def test_request_invalid_json(self) -> None:
        """Non-JSON responses are wrapped in ManagementProtocolError."""
        session, http_client = _session({})
        http_client.post.return_value.json.side_effect = ValueError("Expecting value")

        with pytest.raises(ManagementProtocolError, match="Invalid JSON"):
            await session.request({"type": "version"})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", ["proxy error page", [1, 2], None])
    async def test_request_non_object_body(self, body: Any) -> None:
        """A JSON body that is not an object is a protocol error."""
        session, _ = _session(body)

        with pytest.raises(ManagementProtocolError, match="Unexpected Jolokia response"):
            await session.request({"type": "read", "mbean": "a:b=c", "attribute": "A"})

    @pytest.mark.asyncio
    async def test_read_attribute_non_object_body_is_read_error(self) -> None:
        """A read answered by a non-Jolokia body fails that attribute only."""
        session, _ = _session("proxy error page")

        with pytest.raises(AttributeReadError, match="Unable to read A on a:b=c"):
            await session.read_attribute("a:b=c", "A")

    @pytest.mark.asyncio
    async def test_query_names(self) -> None:
        """query_names sends a search request."""
        names = ["java.lang:name=ParNew,type=GarbageCollector", "java.lang:name=G1,type=GarbageCollector"]
        session, http_client = _session({"status": 200, "value": names})

        result = await session.query_names("java.lang:type=GarbageCollector,name=*")

        assert result == names
        http_client.post.assert_awaited_once_with(
            ENDPOINT,
            json={"type": "search", "mbean": "java.lang:type=GarbageCollector,name=*"},
        )

    @pytest.mark.asyncio
    async def test_query_names_empty(self) -> None:
        """An empty search result is an empty list."""
        session, _ = _session({"status": 200, "value": []})
        assert await session.query_names("none:type=*") == []

    @pytest.mark.asyncio
    async def test_query_names_failure_is_resolution_error(self) -> None:
        """A failed search is reported as an ObjectResolutionError."""
        session, _ = _session({"status": 400, "error": "javax.management.MalformedObjectNameException"})

        with pytest.raises(ObjectResolutionError, match="Unable to resolve object name bad pattern"):
            await session.query_names("bad pattern")

    @pytest.mark.asyncio
    async def test_read_attribute_failure_is_read_error(self) -> None:
        """A failed read is reported as an AttributeReadError."""
        session, _ = _session({"status": 404, "error": "javax.management.AttributeNotFoundException"})

        with pytest.raises(AttributeReadError, match="Unable to read Missing on java.lang:type=Memory"):
            await session.read_attribute("java.lang:type=Memory", "Missing")

    @pytest.mark.asyncio
    async def test_list_attributes(self) -> None:
        """list_attributes returns the attribute names of the MBean."""
        payload = {"status": 200, "value": {"desc": "Memory", "attr": {"HeapMemoryUsage": {}, "Verbose": {}}, "op": {}}}
        session, http_client = _session(payload)

        result = await session.list_attributes("java.lang:type=Memory")

        assert result == ["HeapMemoryUsage", "Verbose"]
        http_client.post.assert_awaited_once_with(ENDPOINT, json={"type": "list", "path": "java.lang/type=Memory"})

    @pytest.mark.asyncio
    async def test_list_attributes_unexpected_value(self) -> None:
        """A list value that is not an object is a protocol error."""
        session, _ = _session({"status": 200, "value": ["HeapMemoryUsage"]})

        with pytest.raises(ManagementProtocolError, match="Unexpected Jolokia list value"):
            await session.list_attributes("java.lang:type=Memory")

    @pytest.mark.asyncio
    async def test_read_attribute_composite(self) -> None:
        """read_attribute converts composite data into a Composite value."""
        session, _ = _session({"status": 200, "value": {"used": 50, "max": 200}})

        value = await session.read_attribute("java.lang:type=Memory", "HeapMemoryUsage")

        assert value == Composite({"used": Numeric(50), "max": Numeric(200)})

    @pytest.mark.asyncio
    async def test_close_and_context_manager(self) -> None:
        """Leaving the context manager closes the HTTP client."""
        session, http_client = _session({})
        async with session:
            pass
        http_client.aclose.assert_awaited_once()


class TestJolokiaClient:
    """Tests for JolokiaClient.connect."""

    def test_endpoint_url(self, tmp_path: Path) -> None:
        """The agent URL honours scheme and path settings."""
        client = JolokiaClient(CollectorSettings(path=tmp_path, jolokia_scheme="https", jolokia_path="jolokia/"))
        assert client.endpoint_url("jvm", 8778) == "https://jvm:8778/jolokia"

    @pytest.mark.asyncio
    async def test_connect_success(self, tmp_path: Path) -> None:
        """A reachable agent yields an open session."""
        client = JolokiaClient(CollectorSettings(path=tmp_path))

        with patch.object(JolokiaSession, "request", new_callable=AsyncMock, return_value={"agent": "2.0.0"}) as req:
            session = await client.connect("jvm", 8778, Credentials(username="user", password="pass"))

        try:
            assert session.endpoint_url == "http://jvm:8778/jolokia"
            req.assert_awaited_once_with({"type": "version"})
        finally:
            await session.close()

    @pytest.mark.asyncio
    async def test_connect_failure_closes_session(self, tmp_path: Path) -> None:
        """An unreachable agent raises EndpointConnectionError after closing the session."""
        client = JolokiaClient(CollectorSettings(path=tmp_path))

        with (
            patch.object(
                JolokiaSession,
                "request",
                new_callable=AsyncMock,
                side_effect=ManagementProtocolError("Connection refused"),
            ),
            patch.object(JolokiaSession, "close", new_callable=AsyncMock) as mock_close,
            pytest.raises(EndpointConnectionError, match="Unable to connect to Jolokia agent at http://jvm:8778"),
        ):
            await client.connect("jvm", 8778)

        mock_close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_connect_timeout_closes_session(self, tmp_path: Path) -> None:
        """A caller timeout during the version check still closes the HTTP client."""
        client = JolokiaClient(CollectorSettings(path=tmp_path))

        async def _hang(_payload: dict[str, Any]) -> Any:
            await asyncio.sleep(10)

        with (
            patch.object(JolokiaSession, "request", new_callable=AsyncMock, side_effect=_hang),
            patch.object(JolokiaSession, "close", new_callable=AsyncMock) as mock_close,
            pytest.raises(TimeoutError),
        ):
            async with asyncio.timeout(0.05):
                await client.connect("jvm", 8778)

        mock_close.assert_awaited_once()
