"""Functional test case catalogue generation.

This module provides the CsvTestCaseSynthesizer class, which enumerates
positive, negative, boundary and security test cases for every operation of
a parsed specification and renders them as a 15-column CSV sheet for manual
or semi-automated execution.
"""

import csv
import io
import json
import logging
import re
from dataclasses import replace
from pathlib import Path
from typing import Any, Iterator, Optional

from loadplan_gen.core.data_structures import CsvTestCaseRow, Operation, ParsedSpec
from loadplan_gen.core.sample_generator import Clock, SampleGenerator
from loadplan_gen.core.schema_model import KIND_OBJECT, KIND_STRING
from loadplan_gen.exceptions import CsvSynthesisException

logger = logging.getLogger(__name__)

CSV_HEADERS = [
    "Sr.No.",
    "Module Name",
    "Description",
    "Method",
    "API",
    "Request Headers",
    "Content-Type",
    "Token",
    "Body(Request)",
    "Expected Status Code",
    "Expected Response",
    "Actual Status Code",
    "Actual Response",
    "Result",
    "Comment",
]

JSON_CONTENT_TYPE = "application/json"
JSON_HEADERS = "Content Type: application/json"

DEFAULT_MODULE = "API"
DEFAULT_ROLES = ["SUPER_USER", "MANAGER", "USER"]

# Candidate verbs for the method-not-allowed case, in preference order
ALTERNATE_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH"]
PAYLOAD_METHODS = ("POST", "PUT", "PATCH")

NOT_FOUND_PLACEHOLDER = "nonexistent_id"
INVALID_TYPE_BODY = '{"invalidField": "invalid_data_type"}'

_ROLE_KEYWORDS = ("role", "admin", "user", "manager")
_ROLE_PATTERN = re.compile(
    r"(admin|user|manager|super\s*user|employee|associate|requestor|guest)", re.IGNORECASE
)
_PATH_PLACEHOLDER = re.compile(r"\{[^}]+\}")


def is_role_based(prompt: Optional[str]) -> bool:
    """True when a free-text prompt mentions roles or role names."""
    if not prompt:
        return False
    lowered = prompt.lower()
    return any(keyword in lowered for keyword in _ROLE_KEYWORDS)


def extract_roles(prompt: Optional[str]) -> list[str]:
    """Extract role names from a free-text prompt.

    Matches are upper-cased with inner whitespace replaced by underscores and
    de-duplicated in order of appearance. A role-based prompt that names no
    known role yields DEFAULT_ROLES.

    Example:
        >>> extract_roles("Test as admin, then as Super User and admin again")
        ['ADMIN', 'SUPER_USER']
    """
    if not is_role_based(prompt):
        return []

    roles: list[str] = []
    for match in _ROLE_PATTERN.findall(prompt or ""):
        role = re.sub(r"\s+", "_", match.upper())
        if role not in roles:
            roles.append(role)

    return roles or list(DEFAULT_ROLES)


def large_payload() -> dict[str, Any]:
    """Oversized request body used by the payload-limit case."""
    return {
        "data": "x" * 10000,
        "array": [{"field": "value"} for _ in range(1000)],
        "description": "This is a test payload designed to exceed typical size limits for API requests",
    }


def _compact(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class CsvTestCaseSynthesizer:
    """Synthesize a functional test case sheet from a parsed specification.

    For each operation, in document order, rows are emitted in a fixed
    category order: valid request, role access, missing authentication,
    missing required parameters, invalid data types, boundary values,
    resource not found, method not allowed, invalid content type and large
    payload. Serial numbers run across the whole sheet.

    Example:
        >>> synthesizer = CsvTestCaseSynthesizer()
        >>> rows = synthesizer.synthesize(parsed)
        >>> csv_text = synthesizer.render(rows)
    """

    def __init__(self, clock: Optional[Clock] = None) -> None:
        """Initialize synthesizer.

        Args:
            clock: Callable returning the current time, used for date formats
        """
        self._clock = clock

    def synthesize(self, parsed: ParsedSpec, prompt: Optional[str] = None) -> list[CsvTestCaseRow]:
        """Build numbered test case rows for every operation.

        Args:
            parsed: Parsed specification
            prompt: Optional free-text instructions; role names in it add
                    role-based access rows

        Returns:
            Rows numbered from 1 in output order
        """
        generator = SampleGenerator(parsed.spec, clock=self._clock)
        role_based = is_role_based(prompt)
        roles = extract_roles(prompt)
        if roles:
            logger.debug("Role-based test cases for roles: %s", ", ".join(roles))

        cases = (
            case
            for operation in parsed.operations
            for case in self._operation_cases(operation, parsed, generator, role_based, roles)
        )
        return [replace(case, serial=serial) for serial, case in enumerate(cases, start=1)]

    def render(self, rows: list[CsvTestCaseRow]) -> str:
        """Render rows as CSV text with the fixed header line first."""
        output = io.StringIO()
        writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
        writer.writerow(CSV_HEADERS)
        for row in rows:
            writer.writerow(row.to_row())
        return output.getvalue()

    def write(self, parsed: ParsedSpec, output_path: str, prompt: Optional[str] = None) -> dict:
        """Synthesize test cases and save them as a UTF-8 CSV file.

        Args:
            parsed: Parsed specification
            output_path: Path where to save the CSV file
            prompt: Optional free-text instructions (see synthesize)

        Returns:
            Dictionary with keys: success, csv_path, rows_created, operations

        Raises:
            CsvSynthesisException: If the file cannot be written
        """
        rows = self.synthesize(parsed, prompt)
        output_file = Path(output_path)
        try:
            output_file.parent.mkdir(parents=True, exist_ok=True)
            output_file.write_text(self.render(rows), encoding="utf-8")
        except OSError as e:
            raise CsvSynthesisException(f"Failed to write CSV file {output_path}: {e}") from e

        logger.info("Wrote %d test cases to %s", len(rows), output_file)
        return {
            "success": True,
            "csv_path": str(output_file.absolute()),
            "rows_created": len(rows),
            "operations": len(parsed.operations),
        }

    def _operation_cases(
        self,
        operation: Operation,
        parsed: ParsedSpec,
        generator: SampleGenerator,
        role_based: bool,
        roles: list[str],
    ) -> Iterator[CsvTestCaseRow]:
        """Yield unnumbered rows for one operation in category order."""
        module = operation.tags[0] if operation.tags else DEFAULT_MODULE
        description = (
            operation.summary
            or operation.description
            or f"{operation.method} operation for {operation.path}"
        )
        body_schema = self._json_body_schema(operation)
        body = self._body_sample(body_schema, generator)

        def case(suffix: str, expected_status: str, comment: str, **overrides: Any) -> CsvTestCaseRow:
            values = {
                "serial": 0,
                "module": module,
                "description": f"{description} - {suffix}",
                "method": operation.method,
                "api": operation.path,
                "request_headers": JSON_HEADERS,
                "content_type": JSON_CONTENT_TYPE,
                "token": "Yes",
                "body": body,
                "expected_status": expected_status,
                "comment": comment,
            }
            values.update(overrides)
            return CsvTestCaseRow(**values)

        yield case("Valid Request", "200 OK", "Positive test case with valid data")

        for role in roles:
            yield case(f"{role} Access", "200 OK", f"{role} role access test")
            yield case(f"{role} No Token", "401 Unauthorized", f"{role} unauthorized access test", token="No")

        if parsed.has_security and not role_based:
            yield case(
                "Missing Authentication",
                "401 Unauthorized",
                "Authentication test - missing or invalid credentials",
                token="No",
            )

        required = operation.required_parameters
        if required:
            yield case(
                "Missing Required Parameters",
                "400 Bad Request",
                "Validation test - missing required parameters: " + ", ".join(p.name for p in required),
                body="",
            )

        if body:
            yield case(
                "Invalid Data Types",
                "400 Bad Request",
                "Validation test - invalid data types in request body",
                body=INVALID_TYPE_BODY,
            )

        boundary = self.boundary_values(body_schema, generator) if body_schema is not None else None
        if boundary is not None:
            yield case(
                "Boundary Values",
                "400 Bad Request",
                "Boundary test - values at or beyond allowed limits",
                body=_compact(boundary),
            )

        if operation.parameters_in("path"):
            yield case(
                "Resource Not Found",
                "404 Not Found",
                "Negative test - resource does not exist",
                api=_PATH_PLACEHOLDER.sub(NOT_FOUND_PLACEHOLDER, operation.path),
            )

        alternate = next((m for m in ALTERNATE_METHODS if m != operation.method), None)
        if alternate is not None:
            yield case(
                "Method Not Allowed",
                "405 Method Not Allowed",
                f"HTTP method {alternate} not allowed for this endpoint",
                method=alternate,
                body="",
            )

        if operation.method in PAYLOAD_METHODS:
            yield case(
                "Invalid Content Type",
                "415 Unsupported Media Type",
                "Content type validation - unsupported media type",
                request_headers="Content Type: text/plain",
                content_type="text/plain",
                body="",
            )
            if body:
                yield case(
                    "Large Payload",
                    "413 Payload Too Large",
                    "Boundary test - payload size exceeds limits",
                    body=_compact(large_payload()),
                )

    def _json_body_schema(self, operation: Operation) -> Optional[dict[str, Any]]:
        if operation.request_body is None:
            return None
        media = operation.request_body.content.get(JSON_CONTENT_TYPE)
        return media.schema if media is not None else None

    def _body_sample(self, schema: Optional[dict[str, Any]], generator: SampleGenerator) -> str:
        """Compact JSON sample for a body schema, empty when there is none."""
        if not schema:
            return ""
        if schema.get("example") is not None:
            return _compact(schema["example"])
        return _compact(generator.generate(schema))

    def boundary_values(self, schema: Any, generator: SampleGenerator) -> Optional[dict[str, Any]]:
        """Build an object whose bounded properties sit just outside their limits.

        Strings with maxLength get one character too many; otherwise strings
        with minLength get one too few. Numbers with maximum get max + 1;
        otherwise numbers with minimum get min - 1.

        Returns:
            Mapping of property name to out-of-range value, or None when no
            property declares limits
        """
        node = generator.resolve(schema)
        if node.kind != KIND_OBJECT or not any(prop.has_limits for prop in node.properties.values()):
            return None

        values: dict[str, Any] = {}
        for name, prop in node.properties.items():
            if prop.kind == KIND_STRING:
                if prop.max_length:
                    values[name] = "a" * (prop.max_length + 1)
                elif prop.min_length:
                    values[name] = "a" * (prop.min_length - 1) if prop.min_length > 1 else ""
            elif prop.is_numeric:
                if prop.maximum is not None:
                    values[name] = prop.maximum + 1
                elif prop.minimum is not None:
                    values[name] = prop.minimum - 1
        return values
