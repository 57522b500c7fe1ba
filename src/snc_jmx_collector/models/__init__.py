"""Data models for the JMX collector.

This package provides the validated endpoint configuration, the tagged
attribute-value variant produced by protocol adapters and the metric event
handed to sinks.
"""

from .events import MetricEvent
from .records import ConfigRecord, Credentials, QuerySpec
from .values import Boolean, Composite, MetricValue, Numeric, ScalarValue, Text, from_json

__all__ = [
    "Boolean",
    "Composite",
    "ConfigRecord",
    "Credentials",
    "MetricEvent",
    "MetricValue",
    "Numeric",
    "QuerySpec",
    "ScalarValue",
    "Text",
    "from_json",
]
