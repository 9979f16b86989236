"""Data structures for parsed API specifications.

This module defines the dataclasses shared by the OpenAPI and HAR parsers,
the JMX generator and the CSV test case synthesizer.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

# HTTP methods recognised when walking a spec's paths object
HTTP_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]


def format_value(value: Any) -> str:
    """Render a JSON value as request text.

    Example:
        >>> format_value(True), format_value(["a", "b"]), format_value(3)
        ('true', '["a", "b"]', '3')
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, dict, list)) or value is None:
        return json.dumps(value, ensure_ascii=False)
    return str(value)


@dataclass
class Parameter:
    """A single operation parameter.

    Attributes:
        name: Parameter name as declared in the spec
        location: Where the parameter lives - "path", "query", "header" or "cookie"
        required: True when the spec marks the parameter as required
        schema: Raw schema mapping (optional)
        example: Example value (optional)
        default: Default value, taken from the parameter schema (optional)
    """

    name: str
    location: str
    required: bool = False
    schema: Optional[dict[str, Any]] = None
    example: Any = None
    default: Any = None

    def sample_value(self) -> Optional[str]:
        """Return example or default as a string, or None if neither is set."""
        value = self.example if self.example is not None else self.default
        if value is None:
            return None
        return format_value(value)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "in": self.location,
            "required": self.required,
            "schema": self.schema,
            "example": self.example,
            "default": self.default,
        }


@dataclass
class MediaType:
    """Request body content for one content type.

    Attributes:
        schema: Raw schema mapping (optional)
        example: Literal example value (optional)
        examples: Named examples mapping (may be empty)
    """

    schema: Optional[dict[str, Any]] = None
    example: Any = None
    examples: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "schema": self.schema,
            "example": self.example,
            "examples": self.examples,
        }


@dataclass
class RequestBody:
    """Operation request body keyed by content type.

    Attributes:
        content: Mapping of content type to MediaType, in declaration order
        required: True when the body is required
    """

    content: dict[str, MediaType] = field(default_factory=dict)
    required: bool = False

    def preferred_media(self) -> Optional[tuple[str, MediaType]]:
        """Pick the JSON content entry, falling back to the first one.

        Returns:
            Tuple of (content_type, MediaType), or None when content is empty
        """
        if not self.content:
            return None
        for content_type, media in self.content.items():
            if "json" in content_type.lower():
                return content_type, media
        content_type = next(iter(self.content))
        return content_type, self.content[content_type]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "content": {ct: media.to_dict() for ct, media in self.content.items()},
            "required": self.required,
        }


@dataclass
class Operation:
    """One HTTP endpoint and method pair.

    Attributes:
        path: URL template, may contain {param} placeholders
        method: HTTP method in uppercase
        operation_id: operationId from spec (optional)
        summary: Short summary (may be empty)
        description: Longer description (may be empty)
        tags: Ordered tags; the first one is used for grouping
        parameters: Ordered parameters
        request_body: Request body (optional)
        responses: Mapping of status code string to raw response object
        server_url: Absolute origin for operations that target another host
    """

    path: str
    method: str
    operation_id: Optional[str] = None
    summary: str = ""
    description: str = ""
    tags: list[str] = field(default_factory=list)
    parameters: list[Parameter] = field(default_factory=list)
    request_body: Optional[RequestBody] = None
    responses: dict[str, Any] = field(default_factory=dict)
    server_url: Optional[str] = None

    def parameters_in(self, location: str) -> list[Parameter]:
        """Return parameters declared in the given location."""
        return [p for p in self.parameters if p.location == location]

    @property
    def required_parameters(self) -> list[Parameter]:
        return [p for p in self.parameters if p.required]

    @property
    def label(self) -> str:
        return f"{self.method} {self.path}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "path": self.path,
            "method": self.method,
            "operation_id": self.operation_id,
            "summary": self.summary,
            "description": self.description,
            "tags": list(self.tags),
            "parameters": [p.to_dict() for p in self.parameters],
            "request_body": self.request_body.to_dict() if self.request_body else None,
            "responses": self.responses,
            "server_url": self.server_url,
        }


@dataclass
class SecurityScheme:
    """Security scheme declared by a spec.

    Attributes:
        name: Key of the scheme in securitySchemes / securityDefinitions
        type: Scheme type - "apiKey", "http", "basic", "oauth2", "openIdConnect"
        location: For apiKey schemes, where the key is sent ("header", "query", "cookie")
        param_name: For apiKey schemes, the header or parameter name
        scheme: For http schemes, "bearer" or "basic"
    """

    name: str
    type: str
    location: Optional[str] = None
    param_name: Optional[str] = None
    scheme: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "type": self.type,
            "in": self.location,
            "param_name": self.param_name,
            "scheme": self.scheme,
        }


@dataclass
class ParsedSpec:
    """Result of parsing an OpenAPI/Swagger document or a HAR capture.

    Attributes:
        title: API title (info.title, or HAR creator)
        version: API version string
        spec_type: "openapi", "swagger" or "har"
        base_url: Resolved base URL, None when the document declares none
        base_path: Swagger 2.0 basePath (empty string otherwise)
        operations: Parsed operations in document order
        security_schemes: Declared security schemes
        spec: Raw document, kept for $ref lookups
    """

    title: str
    version: str
    spec_type: str
    base_url: Optional[str] = None
    base_path: str = ""
    operations: list[Operation] = field(default_factory=list)
    security_schemes: list[SecurityScheme] = field(default_factory=list)
    spec: dict[str, Any] = field(default_factory=dict)

    @property
    def has_security(self) -> bool:
        return bool(self.security_schemes)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "title": self.title,
            "version": self.version,
            "spec_type": self.spec_type,
            "base_url": self.base_url,
            "base_path": self.base_path,
            "operations": [op.to_dict() for op in self.operations],
            "security_schemes": [s.to_dict() for s in self.security_schemes],
        }


@dataclass(frozen=True)
class UrlParts:
    """Connection settings split out of a base URL.

    Attributes:
        protocol: "http" or "https"
        domain: Host name
        port: Port as a string ("443" / "80" when the URL has none)
        path: URL path without trailing slash, empty for the root
    """

    protocol: str
    domain: str
    port: str
    path: str = ""


@dataclass(frozen=True)
class CsvTestCaseRow:
    """One row of the functional test case CSV.

    Attributes mirror the fixed 15-column header; the actual-result columns
    are left blank for testers to fill in.
    """

    serial: int
    module: str
    description: str
    method: str
    api: str
    request_headers: str
    content_type: str
    token: str
    body: str
    expected_status: str
    comment: str
    expected_response: str = ""
    actual_status: str = ""
    actual_response: str = ""
    result: str = ""

    def to_row(self) -> list[str]:
        """Return the row cells in header order."""
        return [
            str(self.serial),
            self.module,
            self.description,
            self.method,
            self.api,
            self.request_headers,
            self.content_type,
            self.token,
            self.body,
            self.expected_status,
            self.expected_response,
            self.actual_status,
            self.actual_response,
            self.result,
            self.comment,
        ]
