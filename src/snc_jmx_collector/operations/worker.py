"""Collector workers that poll one endpoint per config record.

Failures are contained at the smallest unit of work that owns them:

- an unreadable attribute drops that metric only;
- an unresolvable alias or attribute listing drops that object only;
- a failed pattern lookup, or a pattern matching nothing, skips that query;
- a connection failure abandons the record for the current cycle;
- anything else is logged at the worker's iteration boundary.

A worker only stops when its task is cancelled.
"""

import asyncio
import logging
from dataclasses import dataclass
from types import TracebackType
from typing import Self, TypeAlias

from ..client.protocol import ManagementClient, ManagementSession
from ..config import CollectorSettings
from ..errors import EndpointConnectionError
from ..models.records import ConfigRecord, QuerySpec
from ..sinks import EventSink
from .alias import resolve_alias
from .metrics import EventContext, build_metric_event, flatten_value, join_metric_path

logger = logging.getLogger("snc_jmx_collector.operations.worker")

WorkQueue: TypeAlias = asyncio.Queue[ConfigRecord]


def _describe(exc: BaseException) -> str:
    """Return the exception message, or its type name when the message is empty (e.g. timeouts)."""
    return str(exc) or type(exc).__name__


@dataclass(slots=True)
class PollReport:
    """Outcome of polling one config record."""

    endpoint: str
    connected: bool = False
    events: int = 0
    skipped_queries: int = 0
    failed_objects: int = 0
    failed_attributes: int = 0


@dataclass(frozen=True, slots=True)
class PollContext:
    """Everything needed while walking the queries of one record.

    Groups related parameters to reduce function argument counts.
    """

    record: ConfigRecord
    session: ManagementSession
    sink: EventSink
    events: EventContext
    timeout_s: float
    report: PollReport


async def _emit_attribute(poll: PollContext, object_name: str, object_path: str, attribute: str) -> None:
    """Read one attribute and emit an event per scalar it contains."""
    try:
        async with asyncio.timeout(poll.timeout_s):
            value = await poll.session.read_attribute(object_name, attribute)
    except Exception as exc:  # noqa: BLE001
        poll.report.failed_attributes += 1
        logger.warning(
            "Failed retrieving metrics for attribute %s on object %s of %s: %s",
            attribute,
            object_name,
            poll.record.endpoint,
            _describe(exc),
        )
        return

    for suffix, scalar in flatten_value(attribute, value):
        metric_path = join_metric_path(poll.record.base_path, object_path, suffix)
        await poll.sink.put(build_metric_event(poll.events, metric_path, scalar))
        poll.report.events += 1


async def _poll_object(poll: PollContext, query: QuerySpec, object_name: str) -> None:
    """Emit the configured (or all) attributes of one matched object."""
    try:
        object_path = resolve_alias(query.object_alias, object_name) if query.object_alias else object_name
        if query.attributes is not None:
            attributes = list(query.attributes)
        else:
            logger.debug("No attribute to retrieve defined on %s, will retrieve all", object_name)
            async with asyncio.timeout(poll.timeout_s):
                attributes = await poll.session.list_attributes(object_name)
    except Exception as exc:  # noqa: BLE001
        poll.report.failed_objects += 1
        logger.warning(
            "Failed preparing object %s of %s: %s",
            object_name,
            poll.record.endpoint,
            _describe(exc),
        )
        return

    for attribute in attributes:
        await _emit_attribute(poll, object_name, object_path, attribute)


async def _poll_query(poll: PollContext, query: QuerySpec) -> None:
    """Resolve a query's object pattern and poll every matched object in order."""
    logger.debug("Find all object names %s on %s", query.object_pattern, poll.record.endpoint)
    try:
        async with asyncio.timeout(poll.timeout_s):
            object_names = await poll.session.query_names(query.object_pattern)
    except Exception as exc:  # noqa: BLE001
        poll.report.skipped_queries += 1
        logger.warning(
            "Failed resolving object name %s on %s: %s",
            query.object_pattern,
            poll.record.endpoint,
            _describe(exc),
        )
        return

    if not object_names:
        poll.report.skipped_queries += 1
        logger.warning("No jmx object found for %s on %s", query.object_pattern, poll.record.endpoint)
        return

    for object_name in object_names:
        await _poll_object(poll, query, object_name)


async def poll_record(
    record: ConfigRecord,
    *,
    client: ManagementClient,
    sink: EventSink,
    settings: CollectorSettings,
) -> PollReport:
    """Connect to one endpoint, emit its metrics and close the connection.

    Args:
        record: The validated endpoint configuration.
        client: Management-protocol client used to open the session.
        sink: Receiver of the metric events.
        settings: Collector settings providing the event fields and the per-operation timeout.

    Returns:
        Counters describing what was emitted and what was skipped.

    """
    report = PollReport(endpoint=record.endpoint)
    if record.credentials:
        logger.debug("Connect to %s with user %s", record.endpoint, record.credentials.username)
    else:
        logger.debug("Connect to %s", record.endpoint)

    try:
        async with asyncio.timeout(settings.timeout_s):
            session = await client.connect(record.host, record.port, record.credentials)
    except (EndpointConnectionError, TimeoutError) as exc:
        logger.warning("Unable to connect to %s: %s", record.endpoint, _describe(exc))
        return report
    report.connected = True

    poll = PollContext(
        record=record,
        session=session,
        sink=sink,
        events=EventContext(host=record.host, path=str(settings.path), event_type=settings.event_type),
        timeout_s=settings.timeout_s,
        report=report,
    )
    try:
        for query in record.queries:
            await _poll_query(poll, query)
    finally:
        try:
            async with asyncio.timeout(settings.timeout_s):
                await session.close()
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed closing connection to %s: %s", record.endpoint, _describe(exc))

    return report


class CollectorWorker:
    """Long-running consumer of the work queue."""

    def __init__(
        self,
        name: str,
        queue: WorkQueue,
        *,
        client: ManagementClient,
        sink: EventSink,
        settings: CollectorSettings,
    ) -> None:
        """Initialize the worker.

        Args:
            name: Worker name used in log messages.
            queue: Shared work queue of config records.
            client: Management-protocol client.
            sink: Receiver of the metric events.
            settings: Collector settings.

        """
        self.name = name
        self._queue = queue
        self._client = client
        self._sink = sink
        self._settings = settings

    async def run(self) -> None:
        """Poll records from the queue until cancelled."""
        while True:
            logger.debug("%s waiting for a config record", self.name)
            record = await self._queue.get()
            try:
                report = await poll_record(record, client=self._client, sink=self._sink, settings=self._settings)
                logger.debug("%s polled %s: %s", self.name, record.endpoint, report)
            except Exception:
                logger.exception("%s failed polling %s from %s", self.name, record.endpoint, record.source)
            finally:
                self._queue.task_done()


class WorkerPool:
    """Fixed-size pool of ``CollectorWorker`` tasks sharing one queue."""

    def __init__(
        self,
        queue: WorkQueue,
        *,
        size: int,
        client: ManagementClient,
        sink: EventSink,
        settings: CollectorSettings,
    ) -> None:
        """Initialize the pool without starting it."""
        if size < 1:
            msg = f"Worker pool size must be at least 1, got {size}."
            raise ValueError(msg)
        self._workers = [
            CollectorWorker(f"jmx-worker-{index}", queue, client=client, sink=sink, settings=settings)
            for index in range(size)
        ]
        self._tasks: list[asyncio.Task[None]] = []

    async def __aenter__(self) -> Self:
        """Start the pool for ``async with`` usage."""
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Shut the pool down when leaving an ``async with`` block."""
        await self.shutdown()

    @property
    def size(self) -> int:
        """Return the number of workers."""
        return len(self._workers)

    @property
    def running(self) -> bool:
        """Return whether the worker tasks are started."""
        return bool(self._tasks)

    def start(self) -> None:
        """Create one task per worker. Must be called from a running event loop."""
        if self._tasks:
            msg = "Worker pool is already running."
            raise RuntimeError(msg)
        logger.info("Init %d jmx collector workers", len(self._workers))
        self._tasks = [asyncio.create_task(worker.run(), name=worker.name) for worker in self._workers]

    async def shutdown(self) -> None:
        """Stop every worker and wait for them to exit. Safe to call more than once."""
        tasks, self._tasks = self._tasks, []
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        if tasks:
            logger.info("Stopped %d jmx collector workers", len(tasks))


__all__ = ["CollectorWorker", "PollContext", "PollReport", "WorkQueue", "WorkerPool", "poll_record"]
