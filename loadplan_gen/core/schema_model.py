"""Typed view over JSON Schema nodes found in OpenAPI documents.

Raw schema mappings are converted into SchemaNode instances with an explicit
kind, so sample generation and boundary derivation dispatch on the kind
instead of probing dictionary shapes at every call site.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

KIND_REF = "ref"
KIND_OBJECT = "object"
KIND_ARRAY = "array"
KIND_STRING = "string"
KIND_NUMBER = "number"
KIND_INTEGER = "integer"
KIND_BOOLEAN = "boolean"
KIND_UNKNOWN = "unknown"

_TYPED_KINDS = {
    KIND_OBJECT,
    KIND_ARRAY,
    KIND_STRING,
    KIND_NUMBER,
    KIND_INTEGER,
    KIND_BOOLEAN,
}


def ref_name(ref: str) -> str:
    """Return the final segment of a $ref pointer.

    Example:
        >>> ref_name("#/components/schemas/User")
        'User'
    """
    return ref.rstrip("/").split("/")[-1]


@dataclass
class SchemaNode:
    """A schema node tagged with its kind.

    Attributes:
        kind: One of ref/object/array/string/number/integer/boolean/unknown
        ref_name: Referenced component name (ref kind only)
        example: Explicit example value
        default: Default value
        enum: Allowed values (may be empty)
        format: String format (email, date-time, uuid, ...)
        minimum: Numeric lower bound
        maximum: Numeric upper bound
        min_length: String minimum length
        max_length: String maximum length
        properties: Child nodes for object kind
        items: Item node for array kind
    """

    kind: str
    ref_name: Optional[str] = None
    example: Any = None
    default: Any = None
    enum: list[Any] = field(default_factory=list)
    format: Optional[str] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    properties: dict[str, "SchemaNode"] = field(default_factory=dict)
    items: Optional["SchemaNode"] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "SchemaNode":
        """Build a node from a raw schema mapping.

        Never raises: anything that is not a mapping becomes an unknown node.
        A type given as a list (OpenAPI 3.1 style) uses its first non-null entry.

        Args:
            raw: Raw schema value from the parsed document

        Returns:
            SchemaNode instance
        """
        if not isinstance(raw, dict):
            return cls(kind=KIND_UNKNOWN)

        ref = raw.get("$ref")
        if isinstance(ref, str) and ref:
            return cls(kind=KIND_REF, ref_name=ref_name(ref))

        schema_type = raw.get("type")
        if isinstance(schema_type, list):
            schema_type = next((t for t in schema_type if t != "null"), None)
        if schema_type is None and isinstance(raw.get("properties"), dict):
            schema_type = KIND_OBJECT
        kind = schema_type if schema_type in _TYPED_KINDS else KIND_UNKNOWN

        properties: dict[str, SchemaNode] = {}
        raw_properties = raw.get("properties")
        if kind == KIND_OBJECT and isinstance(raw_properties, dict):
            properties = {name: cls.from_raw(prop) for name, prop in raw_properties.items()}

        items = None
        if kind == KIND_ARRAY and "items" in raw:
            items = cls.from_raw(raw["items"])

        enum = raw.get("enum")
        return cls(
            kind=kind,
            example=raw.get("example"),
            default=raw.get("default"),
            enum=list(enum) if isinstance(enum, list) else [],
            format=raw.get("format") if isinstance(raw.get("format"), str) else None,
            minimum=_number_or_none(raw.get("minimum")),
            maximum=_number_or_none(raw.get("maximum")),
            min_length=_int_or_none(raw.get("minLength")),
            max_length=_int_or_none(raw.get("maxLength")),
            properties=properties,
            items=items,
        )

    @property
    def is_numeric(self) -> bool:
        return self.kind in (KIND_NUMBER, KIND_INTEGER)

    @property
    def has_limits(self) -> bool:
        """True when the node declares length or range bounds."""
        if self.kind == KIND_STRING:
            return bool(self.min_length) or bool(self.max_length)
        if self.is_numeric:
            return self.minimum is not None or self.maximum is not None
        return False


def _number_or_none(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value
