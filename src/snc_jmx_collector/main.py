"""Entry point for the SNC JMX collector.

This module wires the settings, the Jolokia client, the JSON-lines sink and
the collection scheduler together and runs the loop until interrupted.
"""

import asyncio
import logging
import os
import signal
import sys

from .client.jolokia import JolokiaClient
from .config import CollectorSettings
from .operations.scheduler import CollectionScheduler
from .sinks import EventSink, JsonLinesSink

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(name)s [%(levelname)s] %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger("snc_jmx_collector.main")


def build_scheduler(settings: CollectorSettings, *, sink: EventSink | None = None) -> CollectionScheduler:
    """Build a scheduler polling through Jolokia and writing JSON lines to stdout by default."""
    return CollectionScheduler(
        settings,
        client=JolokiaClient(settings),
        sink=sink if sink is not None else JsonLinesSink(sys.stdout),
    )


def handle_interrupt(signum: int, frame: object) -> None:  # noqa: ARG001
    """Handle keyboard interrupt gracefully."""
    logger.info("Received interrupt signal, shutting down...")
    sys.exit(0)


def main() -> None:
    """Entry point for the snc-jmx-collector console script."""
    try:
        settings = CollectorSettings.from_env()
    except RuntimeError as exc:
        logger.error("%s", exc)  # noqa: TRY400
        sys.exit(1)

    signal.signal(signal.SIGINT, handle_interrupt)
    signal.signal(signal.SIGTERM, handle_interrupt)
    logger.info(
        "Polling %s every %ss with %d workers",
        settings.path,
        settings.polling_frequency,
        settings.nb_thread,
    )
    asyncio.run(build_scheduler(settings).run_forever())


if __name__ == "__main__":
    main()
