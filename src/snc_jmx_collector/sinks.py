"""Destinations for finished metric events.

The host pipeline supplies the sink. Anything with an awaitable ``put`` works,
including ``asyncio.Queue``.
"""

import json
import logging
from typing import Protocol, TextIO

from .models.events import MetricEvent

logger = logging.getLogger("snc_jmx_collector.sinks")


class EventSink(Protocol):
    """Receiver of metric events."""

    async def put(self, item: MetricEvent) -> None:
        """Accept one event."""
        ...


class JsonLinesSink:
    """Write each event as one JSON document per line."""

    def __init__(self, stream: TextIO) -> None:
        """Initialize the sink.

        Args:
            stream: Text stream receiving the lines, e.g. ``sys.stdout``.

        """
        self._stream = stream

    async def put(self, item: MetricEvent) -> None:
        """Serialize and write one event."""
        self._stream.write(json.dumps(item.to_document()) + "\n")
        self._stream.flush()


__all__ = ["EventSink", "JsonLinesSink"]
