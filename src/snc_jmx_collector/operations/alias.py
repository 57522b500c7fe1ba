"""Resolution of ``${key}`` placeholders in object aliases.

An object alias such as ``${type}.${name}`` is resolved against the object name
of each matched MBean, e.g. ``java.lang:type=GarbageCollector,name=ParNew``
gives ``GarbageCollector.ParNew``.
"""

import logging
import re

from ..errors import AliasResolutionError

logger = logging.getLogger("snc_jmx_collector.operations.alias")

PLACEHOLDER_PATTERN = re.compile(r"\$\{(.*?)\}")

# A substituted value may itself contain a placeholder; cap the rescans so that
# a value referring to its own key fails instead of looping forever.
MAX_ALIAS_SUBSTITUTIONS = 32

DOMAIN_KEY = "domain"


def _split_properties(properties: str) -> list[str]:
    """Split a key property list on commas that are not inside a quoted value."""
    segments: list[str] = []
    current: list[str] = []
    quoted = False
    escaped = False
    for char in properties:
        if escaped:
            current.append(char)
            escaped = False
            continue
        if char == "\\" and quoted:
            current.append(char)
            escaped = True
            continue
        if char == '"':
            quoted = not quoted
        if char == "," and not quoted:
            segments.append("".join(current))
            current = []
            continue
        current.append(char)
    segments.append("".join(current))
    return segments


def parse_object_name(object_name: str) -> tuple[str, dict[str, str]]:
    """Split an object name into its domain and key properties.

    Args:
        object_name: A JMX object name like ``java.nio:type=BufferPool,name=mapped``.

    Returns:
        The domain and an ordered mapping of key properties. Quoted values keep
        their quotes.

    """
    domain, separator, properties = object_name.partition(":")
    if not separator:
        # Bare key property list without a domain
        domain, properties = "", object_name

    bindings: dict[str, str] = {}
    for segment in _split_properties(properties):
        key, equals, value = segment.partition("=")
        if not equals:
            continue
        bindings.setdefault(key.strip(), value)
    return domain, bindings


def resolve_alias(template: str, object_name: str) -> str:
    """Replace every ``${key}`` in ``template`` with its value from ``object_name``.

    The leftmost placeholder is resolved first and all of its occurrences are
    replaced, then the result is scanned again until no placeholder remains.
    ``${domain}`` resolves to the object-name domain unless a ``domain`` key
    property exists.

    Args:
        template: The configured object alias.
        object_name: The object name of the matched MBean.

    Returns:
        The resolved alias.

    Raises:
        AliasResolutionError: If a placeholder has no binding in the object name,
            or if substitution does not settle within ``MAX_ALIAS_SUBSTITUTIONS`` passes.

    """
    if PLACEHOLDER_PATTERN.search(template) is None:
        return template

    domain, bindings = parse_object_name(object_name)
    resolved = template
    for _ in range(MAX_ALIAS_SUBSTITUTIONS):
        match = PLACEHOLDER_PATTERN.search(resolved)
        if match is None:
            logger.debug("Resolved alias %s to %s using %s", template, resolved, object_name)
            return resolved
        key = match.group(1)
        if key in bindings:
            value = bindings[key]
        elif key == DOMAIN_KEY and domain:
            value = domain
        else:
            msg = f"Alias {template!r} references '{key}', which is not bound in {object_name!r}."
            raise AliasResolutionError(msg)
        resolved = resolved.replace(match.group(0), value)

    if PLACEHOLDER_PATTERN.search(resolved) is None:
        return resolved
    msg = f"Alias {template!r} did not settle after {MAX_ALIAS_SUBSTITUTIONS} substitutions on {object_name!r}."
    raise AliasResolutionError(msg)


__all__ = ["MAX_ALIAS_SUBSTITUTIONS", "PLACEHOLDER_PATTERN", "parse_object_name", "resolve_alias"]
