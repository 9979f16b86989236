"""OpenAPI specification parser for load test plan generation.

This module provides functionality to parse OpenAPI 3.x and Swagger 2.0 specifications
and extract typed operation information for JMX and CSV generation.
"""

import logging
from typing import Any, Optional

from loadplan_gen.core.base_url import resolve_base_url
from loadplan_gen.core.data_structures import (
    HTTP_METHODS,
    MediaType,
    Operation,
    Parameter,
    ParsedSpec,
    RequestBody,
    SecurityScheme,
)
from loadplan_gen.core.spec_loader import INVALID_SPEC_MESSAGE, load_spec_file
from loadplan_gen.exceptions import SpecParseException

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

# Swagger 2.0 parameter keys that belong to the parameter's schema
_SWAGGER_SCHEMA_KEYS = (
    "type",
    "format",
    "items",
    "enum",
    "default",
    "minimum",
    "maximum",
    "minLength",
    "maxLength",
)


class OpenAPIParser:
    """Parse OpenAPI 3.x and Swagger 2.0 specifications into ParsedSpec objects."""

    def __init__(self) -> None:
        """Initialize OpenAPI parser."""
        self._spec: dict[str, Any] = {}  # Store full spec for $ref resolution

    def parse(self, spec_path: str) -> ParsedSpec:
        """Parse OpenAPI specification file.

        Reads a YAML or JSON file (format detected from content, not extension)
        and extracts metadata, base URL, security schemes and operations.

        Args:
            spec_path: Path to OpenAPI spec file

        Returns:
            ParsedSpec instance

        Raises:
            FileNotFoundError: Spec file doesn't exist
            SpecParseException: Content is not a valid OpenAPI/Swagger document

        Example:
            >>> parser = OpenAPIParser()
            >>> result = parser.parse("openapi.yaml")
            >>> print(result.title)
            'My API'
        """
        return self.parse_document(load_spec_file(spec_path))

    def parse_document(self, spec: dict[str, Any]) -> ParsedSpec:
        """Parse an already loaded specification mapping.

        Args:
            spec: Parsed OpenAPI/Swagger document

        Returns:
            ParsedSpec instance

        Raises:
            SpecParseException: Document is neither OpenAPI nor Swagger
        """
        if "openapi" in spec:
            spec_type = "openapi"
            spec_version = str(spec["openapi"])
        elif "swagger" in spec:
            spec_type = "swagger"
            spec_version = str(spec["swagger"])
        elif isinstance(spec.get("paths"), dict):
            logger.warning("Spec has no 'openapi' or 'swagger' field, assuming OpenAPI 3")
            spec_type = "openapi"
            spec_version = ""
        else:
            raise SpecParseException(INVALID_SPEC_MESSAGE)

        self._spec = spec

        info = spec.get("info") if isinstance(spec.get("info"), dict) else {}
        paths = spec.get("paths")
        if not isinstance(paths, dict):
            logger.warning("Spec has no 'paths' mapping, no operations will be generated")
            paths = {}

        base_path = spec.get("basePath") if spec_type == "swagger" else ""
        operations = self._parse_operations(paths)
        logger.debug(
            "Parsed %s %s spec with %d operations", spec_type, spec_version, len(operations)
        )

        return ParsedSpec(
            title=str(info.get("title", "Untitled API")),
            version=str(info.get("version", spec_version or "1.0.0")),
            spec_type=spec_type,
            base_url=resolve_base_url(spec),
            base_path=base_path if isinstance(base_path, str) else "",
            operations=operations,
            security_schemes=self._parse_security_schemes(spec),
            spec=spec,
        )

    def _resolve_ref(self, obj: Any) -> Any:
        """Follow a local $ref pointer (#/a/b/c) to the object it names.

        Non-local or dangling references are returned unchanged.
        """
        seen: set[str] = set()
        while isinstance(obj, dict) and isinstance(obj.get("$ref"), str):
            ref = obj["$ref"]
            if not ref.startswith("#/") or ref in seen:
                return obj
            seen.add(ref)

            target: Any = self._spec
            for part in ref[2:].split("/"):
                part = part.replace("~1", "/").replace("~0", "~")
                if not isinstance(target, dict) or part not in target:
                    logger.warning("Dangling $ref '%s'", ref)
                    return obj
                target = target[part]
            obj = target
        return obj

    def _parse_operations(self, paths: dict[str, Any]) -> list[Operation]:
        """Extract operations from the paths object in document order.

        Path-level parameters are merged into each operation; an operation
        parameter with the same name and location overrides the path-level one.
        """
        operations = []

        for path, path_item in paths.items():
            path_item = self._resolve_ref(path_item)
            if not isinstance(path_item, dict):
                continue

            common_params = path_item.get("parameters") or []

            for key, raw_operation in path_item.items():
                method = str(key).upper()
                if method not in HTTP_METHODS or not isinstance(raw_operation, dict):
                    continue

                raw_params = self._merge_parameters(common_params, raw_operation.get("parameters") or [])
                parameters = [
                    self._parse_parameter(p) for p in raw_params if p.get("in") not in ("body", "formData")
                ]

                request_body = self._parse_request_body(raw_operation, raw_params)

                tags = raw_operation.get("tags") or []
                responses = raw_operation.get("responses") or {}

                operations.append(
                    Operation(
                        path=str(path),
                        method=method,
                        operation_id=raw_operation.get("operationId"),
                        summary=str(raw_operation.get("summary") or ""),
                        description=str(raw_operation.get("description") or ""),
                        tags=[str(t) for t in tags if isinstance(t, (str, int))],
                        parameters=parameters,
                        request_body=request_body,
                        responses={str(code): self._resolve_ref(resp) for code, resp in responses.items()}
                        if isinstance(responses, dict)
                        else {},
                    )
                )

        return operations

    def _merge_parameters(self, common: list[Any], specific: list[Any]) -> list[dict[str, Any]]:
        merged: dict[tuple[str, str], dict[str, Any]] = {}
        for raw in list(common) + list(specific):
            param = self._resolve_ref(raw)
            if not isinstance(param, dict) or "name" not in param:
                continue
            merged[(str(param["name"]), str(param.get("in", "")))] = param
        return list(merged.values())

    def _parse_parameter(self, param: dict[str, Any]) -> Parameter:
        """Convert a raw parameter, handling both OpenAPI 3 and Swagger 2 styles."""
        schema = param.get("schema")
        if not isinstance(schema, dict):
            schema = {k: param[k] for k in _SWAGGER_SCHEMA_KEYS if k in param} or None
        resolved_schema = self._resolve_ref(schema) if schema else None
        if not isinstance(resolved_schema, dict):
            resolved_schema = None

        example = param.get("example")
        if example is None and resolved_schema:
            example = resolved_schema.get("example")

        default = resolved_schema.get("default") if resolved_schema else None
        if default is None:
            default = param.get("default")

        location = str(param.get("in", "query"))
        return Parameter(
            name=str(param["name"]),
            location=location,
            required=bool(param.get("required", False)),
            schema=schema,
            example=example,
            default=default,
        )

    def _parse_request_body(
        self, operation: dict[str, Any], raw_params: list[dict[str, Any]]
    ) -> Optional[RequestBody]:
        """Extract the request body from OpenAPI 3 requestBody or Swagger 2 parameters."""
        if "requestBody" in operation:
            raw_body = self._resolve_ref(operation["requestBody"])
            if not isinstance(raw_body, dict):
                return None
            content: dict[str, MediaType] = {}
            for content_type, raw_media in (raw_body.get("content") or {}).items():
                if not isinstance(raw_media, dict):
                    continue
                examples = raw_media.get("examples")
                content[str(content_type)] = MediaType(
                    schema=raw_media.get("schema") if isinstance(raw_media.get("schema"), dict) else None,
                    example=raw_media.get("example"),
                    examples={k: self._resolve_ref(v) for k, v in examples.items()}
                    if isinstance(examples, dict)
                    else {},
                )
            return RequestBody(content=content, required=bool(raw_body.get("required", False)))

        consumes = operation.get("consumes") or self._spec.get("consumes") or []
        for param in raw_params:
            if param.get("in") == "body":
                content_type = next(
                    (c for c in consumes if "json" in str(c).lower()),
                    consumes[0] if consumes else DEFAULT_CONTENT_TYPE,
                )
                return RequestBody(
                    content={
                        str(content_type): MediaType(
                            schema=param.get("schema") if isinstance(param.get("schema"), dict) else None,
                            example=param.get("example"),
                        )
                    },
                    required=bool(param.get("required", False)),
                )

        form_params = [p for p in raw_params if p.get("in") == "formData"]
        if form_params:
            properties = {
                str(p["name"]): {k: p[k] for k in _SWAGGER_SCHEMA_KEYS if k in p} for p in form_params
            }
            return RequestBody(
                content={FORM_CONTENT_TYPE: MediaType(schema={"type": "object", "properties": properties})},
                required=any(p.get("required") for p in form_params),
            )

        return None

    def _parse_security_schemes(self, spec: dict[str, Any]) -> list[SecurityScheme]:
        """Collect securitySchemes (OpenAPI 3) or securityDefinitions (Swagger 2)."""
        raw_schemes: Any = None
        components = spec.get("components")
        if isinstance(components, dict):
            raw_schemes = components.get("securitySchemes")
        if not raw_schemes:
            raw_schemes = spec.get("securityDefinitions")
        if not isinstance(raw_schemes, dict):
            return []

        schemes = []
        for name, raw in raw_schemes.items():
            raw = self._resolve_ref(raw)
            if not isinstance(raw, dict):
                continue
            schemes.append(
                SecurityScheme(
                    name=str(name),
                    type=str(raw.get("type", "")),
                    location=raw.get("in"),
                    param_name=raw.get("name"),
                    scheme=str(raw["scheme"]).lower() if raw.get("scheme") else None,
                )
            )
        return schemes
