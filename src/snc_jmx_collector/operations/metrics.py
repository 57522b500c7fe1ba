"""Metric path construction and value classification."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass

from ..models.events import MetricEvent
from ..models.values import Boolean, Composite, MetricValue, Numeric, ScalarValue, Text

logger = logging.getLogger("snc_jmx_collector.operations.metrics")

BOOLEAN_SUFFIX = "_bool"


@dataclass(frozen=True, slots=True)
class EventContext:
    """Fields shared by every event emitted for one config record."""

    host: str
    path: str
    event_type: str


def sanitize_metric_path(metric_path: str) -> str:
    """Replace spaces with underscores and strip double quotes."""
    return metric_path.replace(" ", "_").replace('"', "")


def join_metric_path(*parts: str) -> str:
    """Join path components with dots."""
    return ".".join(parts)


def flatten_value(attribute: str, value: MetricValue) -> Iterator[tuple[str, ScalarValue]]:
    """Yield ``(suffix, scalar)`` pairs for an attribute value.

    A scalar yields itself under the attribute name. A composite yields one
    pair per sub-key, suffixed ``<attribute>.<sub_key>``; nested composites are
    flattened the same way.
    """
    if isinstance(value, Composite):
        for sub_key, sub_value in value.items.items():
            yield from flatten_value(join_metric_path(attribute, sub_key), sub_value)
        return
    yield attribute, value


def build_metric_event(context: EventContext, metric_path: str, value: ScalarValue) -> MetricEvent:
    """Classify a scalar value and build its event.

    Numbers go to ``metric_value_number``. Booleans go to ``metric_value_number``
    as 1/0 and their path gets a ``_bool`` suffix. Text goes to
    ``metric_value_string``.
    """
    path = sanitize_metric_path(metric_path)
    match value:
        case Numeric(number):
            logger.debug("The value %s of %s is a number", number, path)
            return MetricEvent(
                host=context.host,
                path=context.path,
                type=context.event_type,
                metric_path=path,
                metric_value_number=number,
            )
        case Boolean(flag):
            logger.debug("The value %s of %s is a boolean", flag, path)
            return MetricEvent(
                host=context.host,
                path=context.path,
                type=context.event_type,
                metric_path=path + BOOLEAN_SUFFIX,
                metric_value_number=1 if flag else 0,
            )
        case Text(text):
            logger.debug("The value %s of %s is not a number", text, path)
            return MetricEvent(
                host=context.host,
                path=context.path,
                type=context.event_type,
                metric_path=path,
                metric_value_string=text,
            )
    msg = f"Cannot build a metric event from {type(value).__name__}."
    raise TypeError(msg)


__all__ = [
    "BOOLEAN_SUFFIX",
    "EventContext",
    "build_metric_event",
    "flatten_value",
    "join_metric_path",
    "sanitize_metric_path",
]
