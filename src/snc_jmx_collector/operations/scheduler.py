"""The collection run loop.

Every cycle goes through three states:

1. ``DISCOVER``: load every config document in the config directory and
   enqueue the valid ones.
2. ``DRAIN_WAIT``: wait for the workers to empty the work queue, counting the
   time spent waiting.
3. ``PACE``: sleep for what remains of the polling interval, or warn when the
   cycle overran it and start the next one immediately.

The worker pool is created once and outlives every cycle; only the queue
contents change between cycles.
"""

import asyncio
import enum
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeAlias

from ..client.protocol import ManagementClient
from ..config import CollectorSettings
from ..errors import ConfigSourceError
from ..models.records import ConfigRecord
from ..sinks import EventSink
from .validation import load_config_source
from .worker import WorkerPool, WorkQueue

logger = logging.getLogger("snc_jmx_collector.operations.scheduler")

SleepFunc: TypeAlias = Callable[[float], Awaitable[None]]


class CycleState(enum.StrEnum):
    """States of one collection cycle."""

    DISCOVER = "discover"
    DRAIN_WAIT = "drain_wait"
    PACE = "pace"


def iter_config_sources(directory: Path) -> list[Path]:
    """Return the regular files of ``directory`` in name order."""
    return sorted(entry for entry in directory.iterdir() if entry.is_file())


class CollectionScheduler:
    """Drive collection cycles over a fixed pool of collector workers."""

    def __init__(
        self,
        settings: CollectorSettings,
        *,
        client: ManagementClient,
        sink: EventSink,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize the scheduler.

        Args:
            settings: Collector settings (config directory, interval, pool size).
            client: Management-protocol client shared by the workers.
            sink: Receiver of the metric events.
            sleep: Coroutine used for every suspension of the scheduler.

        """
        self._settings = settings
        self._sleep = sleep
        self.queue: WorkQueue = asyncio.Queue(maxsize=settings.queue_maxsize)
        self.pool = WorkerPool(
            self.queue,
            size=settings.nb_thread,
            client=client,
            sink=sink,
            settings=settings,
        )
        self.state = CycleState.DISCOVER
        self.cycles = 0

    def start(self) -> None:
        """Start the worker pool."""
        self.pool.start()

    async def shutdown(self) -> None:
        """Stop the worker pool."""
        await self.pool.shutdown()

    def load_sources(self) -> list[ConfigRecord]:
        """Load and validate every config document, skipping the bad ones."""
        records: list[ConfigRecord] = []
        directory = self._settings.path
        logger.info("Load conf files in %s", directory)
        try:
            sources = iter_config_sources(directory)
        except OSError:
            logger.exception("Unable to list conf files in %s", directory)
            return records

        for source in sources:
            try:
                records.append(load_config_source(source))
            except ConfigSourceError as exc:
                logger.warning("Issue parsing file %s: %s", source, exc)
            except Exception:
                logger.exception("Unexpected error loading conf file %s", source)
        return records

    async def discover(self) -> int:
        """Enqueue every valid config record. Returns the number enqueued."""
        self.state = CycleState.DISCOVER
        records = self.load_sources()
        for record in records:
            logger.debug("Add conf %s from %s to the work queue", record.endpoint, record.source)
            await self.queue.put(record)
        return len(records)

    async def drain_wait(self) -> float:
        """Wait until the work queue is empty. Returns the time spent waiting."""
        self.state = CycleState.DRAIN_WAIT
        interval = self._settings.drain_poll_interval
        delta = 0.0
        while not self.queue.empty():
            logger.debug("There are still %d records in the work queue. Sleep %ss.", self.queue.qsize(), interval)
            delta += interval
            await self._sleep(interval)
        return delta

    async def pace(self, delta: float) -> float:
        """Sleep for the rest of the polling interval. Returns the time slept."""
        self.state = CycleState.PACE
        wait_time = self._settings.polling_frequency - delta
        if wait_time > 0:
            logger.debug(
                "Wait %ss (%s-%s seconds waiting for the work queue) before the next jmx metrics collection",
                wait_time,
                self._settings.polling_frequency,
                delta,
            )
            await self._sleep(wait_time)
            return wait_time

        logger.warning(
            "Retrieving metrics took %ss, longer than the polling frequency of %ss. "
            "Adapt nb_thread or polling_frequency to the number of jvm/metrics to retrieve.",
            delta,
            self._settings.polling_frequency,
        )
        return 0.0

    async def run_cycle(self) -> float:
        """Run one discover, drain and pace cycle. Returns the time spent draining."""
        enqueued = await self.discover()
        logger.info("Enqueued %d jmx configurations", enqueued)
        delta = await self.drain_wait()
        await self.pace(delta)
        self.cycles += 1
        return delta

    async def run_forever(self) -> None:
        """Start the workers and run cycles until cancelled."""
        if not self.pool.running:
            self.start()
        try:
            while True:
                await self.run_cycle()
        finally:
            await self.shutdown()


__all__ = ["CollectionScheduler", "CycleState", "SleepFunc", "iter_config_sources"]
