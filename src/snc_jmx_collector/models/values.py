"""Tagged variant for values read from a management attribute.

Protocol adapters convert whatever their transport returns into one of these
four shapes, so the rest of the collector never inspects raw Python types.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias


@dataclass(frozen=True, slots=True)
class Numeric:
    """An integer or floating-point attribute value."""

    value: int | float


@dataclass(frozen=True, slots=True)
class Boolean:
    """A boolean attribute value."""

    value: bool


@dataclass(frozen=True, slots=True)
class Text:
    """Any other scalar, kept in its textual form."""

    value: str


@dataclass(frozen=True, slots=True)
class Composite:
    """A named bag of sub-values (JMX ``CompositeData``)."""

    items: dict[str, MetricValue]


MetricValue: TypeAlias = Numeric | Boolean | Text | Composite
ScalarValue: TypeAlias = Numeric | Boolean | Text


def from_json(value: Any) -> MetricValue:
    """Convert a decoded JSON value into a ``MetricValue``.

    Args:
        value: A value as produced by ``json.loads``.

    Returns:
        The matching variant. Mappings become ``Composite`` recursively, lists
        are kept as their JSON text and ``None`` becomes an empty ``Text``.

    """
    # bool is a subclass of int, so it must be matched first
    if isinstance(value, bool):
        return Boolean(value)
    if isinstance(value, int | float):
        return Numeric(value)
    if isinstance(value, Mapping):
        return Composite({str(key): from_json(sub) for key, sub in value.items()})
    if value is None:
        return Text("")
    if isinstance(value, list | tuple):
        return Text(json.dumps(value, default=str))
    return Text(str(value))


__all__ = [
    "Boolean",
    "Composite",
    "MetricValue",
    "Numeric",
    "ScalarValue",
    "Text",
    "from_json",
]
