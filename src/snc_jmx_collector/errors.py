"""Exception hierarchy for the JMX collector.

Each exception maps to the smallest unit of work that owns it:

- ``ConfigSourceError`` / ``ConfigValidationError``: one config file is skipped.
- ``EndpointConnectionError``: one record is abandoned for the current cycle.
- ``ObjectResolutionError``: one query is skipped.
- ``AttributeReadError`` / ``AliasResolutionError``: one metric is dropped.

None of them is allowed to unwind past the unit that owns it.
"""

from typing import Literal, TypeAlias

ValidationKind: TypeAlias = Literal["missing", "wrong_type", "empty"]


class CollectorError(Exception):
    """Base class for every error raised by the collector."""


class ConfigSourceError(CollectorError):
    """A config source could not be read or parsed."""

    def __init__(self, source: str, message: str) -> None:
        """Initialize with the offending source path and a reason.

        Args:
            source: Path of the config file.
            message: Human-readable reason for the rejection.

        """
        self.source = source
        super().__init__(f"{source}: {message}")


class ConfigValidationError(ConfigSourceError):
    """A parsed config document does not have the expected shape.

    Attributes:
        kind: ``missing``, ``wrong_type`` or ``empty``.
        key: The offending document key.
        query_index: Index of the offending query, when the error is query-scoped.

    """

    def __init__(
        self,
        source: str,
        *,
        kind: ValidationKind,
        key: str,
        expected: str | None = None,
        found: str | None = None,
        query_index: int | None = None,
    ) -> None:
        """Initialize with the structured rejection reason."""
        self.kind = kind
        self.key = key
        self.expected = expected
        self.found = found
        self.query_index = query_index

        where = f" in query #{query_index}" if query_index is not None else ""
        if kind == "missing":
            message = f"Missing parameter '{key}'{where}."
        elif kind == "empty":
            message = f"Parameter '{key}'{where} must not be empty."
        else:
            message = f"Bad type for parameter '{key}'{where}, expecting {expected}, found {found}."
        super().__init__(source, message)


class EndpointConnectionError(CollectorError):
    """The management endpoint could not be reached or refused the credentials."""


class ManagementProtocolError(CollectorError):
    """The management endpoint answered with a protocol-level error."""


class ObjectResolutionError(CollectorError):
    """An object-name pattern could not be resolved against the endpoint."""


class AttributeReadError(CollectorError):
    """A single attribute could not be turned into a metric."""


class AliasResolutionError(AttributeReadError):
    """An object-alias template references a key the object name does not bind."""


__all__ = [
    "AliasResolutionError",
    "AttributeReadError",
    "CollectorError",
    "ConfigSourceError",
    "ConfigValidationError",
    "EndpointConnectionError",
    "ManagementProtocolError",
    "ObjectResolutionError",
    "ValidationKind",
]
