"""Unit tests for object alias placeholder resolution."""

import pytest

from snc_jmx_collector.errors import AliasResolutionError, AttributeReadError
from snc_jmx_collector.operations.alias import MAX_ALIAS_SUBSTITUTIONS, parse_object_name, resolve_alias

GC_NAME = "java.lang:type=GarbageCollector,name=ParNew"


class TestResolveAlias:
    """Tests for resolve_alias."""

    def test_template_without_placeholder_is_unchanged(self) -> None:
        """Templates without placeholders resolve to themselves."""
        assert resolve_alias("Memory", GC_NAME) == "Memory"
        assert resolve_alias("", GC_NAME) == ""

    def test_multiple_placeholders(self) -> None:
        """Each distinct placeholder is resolved from the object name."""
        assert resolve_alias("${type}.${name}", GC_NAME) == "GarbageCollector.ParNew"

    def test_repeated_placeholder(self) -> None:
        """Every occurrence of a placeholder is substituted."""
        assert resolve_alias("${name}-${name}.${type}", GC_NAME) == "ParNew-ParNew.GarbageCollector"

    def test_key_order_does_not_matter(self) -> None:
        """Bindings are looked up by key, not by position."""
        assert resolve_alias("${type}.${name}", "java.nio:name=mapped,type=BufferPool") == "BufferPool.mapped"

    def test_key_is_not_matched_as_substring(self) -> None:
        """A key must match a whole key property, not the tail of another key."""
        object_name = "com.example:typename=Cache,name=users"
        assert resolve_alias("${name}", object_name) == "users"

    def test_domain_placeholder(self) -> None:
        """${domain} resolves to the object-name domain."""
        assert resolve_alias("${domain}.${type}", "java.lang:type=Memory") == "java.lang.Memory"

    def test_missing_key_raises(self) -> None:
        """Referencing an unbound key is an attribute-level failure."""
        with pytest.raises(AliasResolutionError, match="'missing'"):
            resolve_alias("${type}.${missing}", GC_NAME)
        assert issubclass(AliasResolutionError, AttributeReadError)

    def test_self_referential_value_raises(self) -> None:
        """A value that re-introduces its own placeholder must not loop forever."""
        with pytest.raises(AliasResolutionError, match=str(MAX_ALIAS_SUBSTITUTIONS)):
            resolve_alias("${name}", "com.example:name=${name}")

    def test_quoted_value_with_comma(self) -> None:
        """Quoted values may contain commas; quotes are kept for the metric path to strip."""
        object_name = 'com.example:type=Cache,name="users,sessions"'
        assert resolve_alias("${type}.${name}", object_name) == 'Cache."users,sessions"'


class TestParseObjectName:
    """Tests for parse_object_name."""

    def test_domain_and_properties(self) -> None:
        """Object names split into a domain and ordered key properties."""
        domain, bindings = parse_object_name(GC_NAME)
        assert domain == "java.lang"
        assert bindings == {"type": "GarbageCollector", "name": "ParNew"}

    def test_without_domain(self) -> None:
        """A bare key property list parses with an empty domain."""
        assert parse_object_name("type=Memory") == ("", {"type": "Memory"})
