"""Shape checks for JMX config documents.

A config document is accepted only when every required key is present with the
expected primitive type; otherwise the whole document is rejected with the
offending key. Checks run in a fixed order (required keys, optional keys,
then every query) so that the reported reason is deterministic.
"""

import json
import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from ..errors import ConfigSourceError, ConfigValidationError
from ..models.records import ConfigRecord, Credentials, QuerySpec

logger = logging.getLogger("snc_jmx_collector.operations.validation")

REQUIRED_PARAMETERS: tuple[tuple[str, type | tuple[type, ...]], ...] = (
    ("host", str),
    ("port", int),
    ("queries", list),
)
OPTIONAL_PARAMETERS: tuple[tuple[str, type | tuple[type, ...]], ...] = (
    ("alias", str),
    ("username", str),
    ("password", str),
)
QUERY_OPTIONAL_PARAMETERS: tuple[tuple[str, type | tuple[type, ...]], ...] = (
    ("object_alias", str),
    ("attributes", list),
)
QUERY_NAME_KEYS = ("object_name", "object_pattern")


def _type_name(expected: type | tuple[type, ...]) -> str:
    if isinstance(expected, tuple):
        return " or ".join(t.__name__ for t in expected)
    return expected.__name__


def _has_type(value: object, expected: type | tuple[type, ...]) -> bool:
    # JSON booleans must not pass as integers
    if isinstance(value, bool) and expected is not bool:
        return False
    return isinstance(value, expected)


def _check_type(
    source: str,
    container: Mapping[str, Any],
    key: str,
    expected: type | tuple[type, ...],
    *,
    query_index: int | None = None,
) -> None:
    value = container[key]
    if not _has_type(value, expected):
        raise ConfigValidationError(
            source,
            kind="wrong_type",
            key=key,
            expected=_type_name(expected),
            found=type(value).__name__,
            query_index=query_index,
        )


def _validate_query(source: str, index: int, query: object) -> QuerySpec:
    if not isinstance(query, Mapping):
        raise ConfigValidationError(
            source,
            kind="wrong_type",
            key="queries",
            expected="dict",
            found=type(query).__name__,
            query_index=index,
        )

    name_key = next((key for key in QUERY_NAME_KEYS if key in query), None)
    if name_key is None:
        raise ConfigValidationError(source, kind="missing", key="object_name", query_index=index)
    _check_type(source, query, name_key, str, query_index=index)

    for key, expected in QUERY_OPTIONAL_PARAMETERS:
        if key in query:
            _check_type(source, query, key, expected, query_index=index)

    attributes = query.get("attributes")
    if attributes is not None:
        for attribute in attributes:
            if not isinstance(attribute, str):
                raise ConfigValidationError(
                    source,
                    kind="wrong_type",
                    key="attributes",
                    expected="list of str",
                    found=f"list containing {type(attribute).__name__}",
                    query_index=index,
                )

    return QuerySpec(
        object_pattern=query[name_key],
        object_alias=query.get("object_alias"),
        attributes=tuple(attributes) if attributes is not None else None,
    )


def validate_document(raw: object, *, source: str) -> ConfigRecord:
    """Validate a parsed config document and build its ``ConfigRecord``.

    Args:
        raw: The generic tree produced by the JSON parser.
        source: Path of the document, used in error messages and kept on the record.

    Returns:
        The validated record.

    Raises:
        ConfigValidationError: On the first missing or mistyped key. No partial
            record is ever returned.

    """
    if not isinstance(raw, Mapping):
        raise ConfigValidationError(
            source,
            kind="wrong_type",
            key="<root>",
            expected="dict",
            found=type(raw).__name__,
        )

    logger.debug("Check that required parameters are defined with good types in %s", source)
    for key, expected in REQUIRED_PARAMETERS:
        if key not in raw:
            raise ConfigValidationError(source, kind="missing", key=key)
        _check_type(source, raw, key, expected)

    logger.debug("Check optional parameter types in %s", source)
    for key, expected in OPTIONAL_PARAMETERS:
        if key in raw:
            _check_type(source, raw, key, expected)

    if not raw["queries"]:
        raise ConfigValidationError(source, kind="empty", key="queries")

    logger.debug("Check query parameters in %s", source)
    queries = tuple(_validate_query(source, index, query) for index, query in enumerate(raw["queries"]))

    # Sessions are only authenticated when both halves of the credentials are present
    credentials = None
    if "username" in raw and "password" in raw:
        credentials = Credentials(username=raw["username"], password=raw["password"])

    return ConfigRecord(
        host=raw["host"],
        port=raw["port"],
        credentials=credentials,
        metric_alias=raw.get("alias"),
        queries=queries,
        source=source,
    )


def load_config_source(path: Path) -> ConfigRecord:
    """Read, parse and validate one config document.

    Args:
        path: Path of the JSON document.

    Returns:
        The validated record.

    Raises:
        ConfigSourceError: If the file cannot be read, is not valid JSON or fails validation.

    """
    source = str(path)
    logger.debug("Load conf file %s", source)
    try:
        payload = path.read_bytes()
    except OSError as exc:
        raise ConfigSourceError(source, f"Unable to read file: {exc}") from exc

    try:
        document = json.loads(payload)
    except (ValueError, RecursionError) as exc:
        # RecursionError: nesting deeper than the decoder can follow.
        raise ConfigSourceError(source, f"Invalid JSON: {exc}") from exc

    return validate_document(document, source=source)


__all__ = [
    "QUERY_NAME_KEYS",
    "REQUIRED_PARAMETERS",
    "load_config_source",
    "validate_document",
]
