"""Sample data generation from JSON Schema nodes.

This module provides the SampleGenerator class, which produces realistic
JSON-compatible values for request bodies. Generation is total: unknown or
malformed schemas degrade to literal placeholders, and cyclic $ref chains
are cut with an empty object.
"""

import logging
from collections.abc import Callable
from datetime import datetime, timezone
from typing import Any, Optional

from loadplan_gen.core.schema_model import (
    KIND_ARRAY,
    KIND_BOOLEAN,
    KIND_OBJECT,
    KIND_REF,
    KIND_STRING,
    SchemaNode,
)

logger = logging.getLogger(__name__)

# Fixed values for well-known string formats
SAMPLE_EMAIL = "user@example.com"
SAMPLE_UUID = "123e4567-e89b-12d3-a456-426614174000"
SAMPLE_URI = "https://example.com"

DEFAULT_STRING = "sample_string"
DEFAULT_NUMBER = 123
DEFAULT_VALUE = "sample_value"

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Default clock."""
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime) -> str:
    """Format a datetime as UTC ISO 8601 with milliseconds and a Z suffix.

    Example:
        >>> iso_timestamp(datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc))
        '2024-01-02T03:04:05.000Z'
    """
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment.isoformat(timespec="milliseconds") + "Z"


class SampleGenerator:
    """Generate example values from schema nodes.

    Named schemas are looked up in components.schemas (OpenAPI 3.x) and
    then definitions (Swagger 2.0) of the document passed at construction.

    Example:
        >>> generator = SampleGenerator({})
        >>> generator.generate({"type": "object", "properties": {"qty": {"type": "integer", "minimum": 1}}})
        {'qty': 1}
    """

    def __init__(self, spec: Optional[dict[str, Any]] = None, clock: Optional[Clock] = None) -> None:
        """Initialize the generator.

        Args:
            spec: Parsed document used for $ref lookups (optional)
            clock: Callable returning the current time (default: UTC now)
        """
        self._spec = spec or {}
        self._clock = clock or utc_now

    def generate(self, schema: Any) -> Any:
        """Generate a sample value for a raw schema mapping or SchemaNode.

        Args:
            schema: Raw schema mapping or an already converted SchemaNode

        Returns:
            JSON-compatible sample value (never raises)
        """
        node = schema if isinstance(schema, SchemaNode) else SchemaNode.from_raw(schema)
        return self._generate(node, frozenset())

    def lookup_component(self, name: str) -> Optional[dict[str, Any]]:
        """Find a named schema in components.schemas or definitions."""
        components = self._spec.get("components")
        if isinstance(components, dict):
            schemas = components.get("schemas")
            if isinstance(schemas, dict) and isinstance(schemas.get(name), dict):
                return schemas[name]

        definitions = self._spec.get("definitions")
        if isinstance(definitions, dict) and isinstance(definitions.get(name), dict):
            return definitions[name]

        return None

    def resolve(self, schema: Any) -> SchemaNode:
        """Convert a schema and follow a top-level $ref chain.

        Used where the caller needs the referenced node's facets (for example
        property bounds) rather than a generated value. Cycles stop at the
        last node before repetition.
        """
        node = schema if isinstance(schema, SchemaNode) else SchemaNode.from_raw(schema)
        seen: set[str] = set()
        while node.kind == KIND_REF and node.ref_name not in seen:
            seen.add(node.ref_name)
            referenced = self.lookup_component(node.ref_name)
            if referenced is None:
                break
            node = SchemaNode.from_raw(referenced)
        return node

    def _generate(self, node: SchemaNode, seen: frozenset) -> Any:
        if node.kind == KIND_REF:
            return self._generate_ref(node, seen)
        if node.kind == KIND_OBJECT:
            return {name: self._generate(child, seen) for name, child in node.properties.items()}
        if node.kind == KIND_ARRAY:
            return [self._generate(node.items or SchemaNode(kind=KIND_STRING), seen)]
        if node.kind == KIND_STRING:
            return self._generate_string(node)
        if node.is_numeric:
            return self._first_present(node.example, node.default, node.minimum, DEFAULT_NUMBER)
        if node.kind == KIND_BOOLEAN:
            return self._first_present(node.example, node.default, True)
        return self._first_present(node.example, node.default, DEFAULT_VALUE)

    def _generate_ref(self, node: SchemaNode, seen: frozenset) -> Any:
        name = node.ref_name
        if name in seen:
            logger.debug("Cyclic $ref to '%s', using empty object", name)
            return {}

        referenced = self.lookup_component(name)
        if referenced is None:
            logger.warning("Could not resolve $ref '%s'", name)
            return DEFAULT_VALUE

        if referenced.get("example") is not None:
            return referenced["example"]

        return self._generate(SchemaNode.from_raw(referenced), seen | {name})

    def _generate_string(self, node: SchemaNode) -> Any:
        if node.example is not None:
            return node.example

        if node.format == "email":
            return SAMPLE_EMAIL
        if node.format == "date-time":
            return iso_timestamp(self._clock())
        if node.format == "date":
            return iso_timestamp(self._clock())[:10]
        if node.format == "uuid":
            return SAMPLE_UUID
        if node.format == "uri":
            return SAMPLE_URI

        if node.enum:
            return node.enum[0]

        return self._first_present(node.default, DEFAULT_STRING)

    @staticmethod
    def _first_present(*values: Any) -> Any:
        for value in values:
            if value is not None:
                return value
        return None
