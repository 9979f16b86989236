"""HAR capture parser for load test plan generation.

This module converts recorded browser traffic (HTTP Archive format) into
the same ParsedSpec/Operation structures produced by the OpenAPI parser,
so HAR captures flow through the regular JMX generator.
"""

import json
import logging
import os
import re
from typing import Any, Optional
from urllib.parse import parse_qsl, urlsplit

from loadplan_gen.core.data_structures import (
    HTTP_METHODS,
    MediaType,
    Operation,
    Parameter,
    ParsedSpec,
    RequestBody,
)
from loadplan_gen.core.spec_loader import load_har_file

logger = logging.getLogger(__name__)

# Extensions treated as static assets and skipped by default
STATIC_EXTENSIONS = {
    ".js", ".mjs", ".css", ".map",
    ".png", ".jpg", ".jpeg", ".gif", ".svg", ".ico", ".webp", ".bmp",
    ".woff", ".woff2", ".ttf", ".otf", ".eot",
    ".mp4", ".webm", ".mp3", ".wav",
}

# Request headers that JMeter manages itself or that are tied to a recording session
SKIPPED_HEADERS = {
    "host",
    "content-length",
    "connection",
    "cookie",
    "accept-encoding",
    "keep-alive",
    "transfer-encoding",
    "upgrade",
    "te",
}

_EXTENSION_PATTERN = re.compile(r"\.[A-Za-z0-9]{1,8}$")


class HARParser:
    """Convert HAR captures into ParsedSpec objects.

    Each recorded request becomes one Operation tagged with its host name.
    Static asset requests are skipped unless include_static is set, and
    repeated METHOD+URL pairs are collapsed to the first occurrence.
    """

    def __init__(self, include_static: bool = False) -> None:
        """Initialize HAR parser.

        Args:
            include_static: Keep requests for static assets (scripts, images, fonts)
        """
        self.include_static = include_static

    def parse(self, har_path: str) -> ParsedSpec:
        """Parse a HAR file.

        Raises:
            FileNotFoundError: HAR file doesn't exist
            InvalidHarException: File is not a valid HAR document
        """
        return self.parse_document(load_har_file(har_path))

    def parse_document(self, har: dict[str, Any]) -> ParsedSpec:
        """Convert a validated HAR mapping into a ParsedSpec.

        The base URL is the origin of the first kept request; requests to any
        other origin carry their own server_url.

        Args:
            har: HAR document with log.entries

        Returns:
            ParsedSpec with spec_type "har"
        """
        log = har["log"]
        creator = log.get("creator") if isinstance(log.get("creator"), dict) else {}

        operations: list[Operation] = []
        seen: set[tuple[str, str]] = set()
        base_origin: Optional[str] = None
        skipped = 0

        for index, entry in enumerate(log["entries"]):
            request = entry.get("request") if isinstance(entry, dict) else None
            if not isinstance(request, dict) or not request.get("url"):
                logger.warning("Skipping HAR entry %d without a request URL", index)
                skipped += 1
                continue

            url = str(request["url"])
            method = str(request.get("method") or "GET").upper()
            if method not in HTTP_METHODS:
                logger.debug("Unsupported method %s in HAR entry %d, using GET", method, index)
                method = "GET"

            parts = urlsplit(url)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                logger.debug("Skipping non-HTTP HAR entry %d: %s", index, url)
                skipped += 1
                continue

            path = parts.path or "/"
            if not self.include_static and self._is_static(path):
                skipped += 1
                continue

            key = (method, url)
            if key in seen:
                continue
            seen.add(key)

            origin = f"{parts.scheme}://{parts.netloc}"
            if base_origin is None:
                base_origin = origin

            operations.append(
                Operation(
                    path=path,
                    method=method,
                    summary=f"{method} {path}",
                    tags=[parts.hostname or parts.netloc],
                    parameters=self._query_parameters(parts.query) + self._header_parameters(request),
                    request_body=self._request_body(request.get("postData")),
                    responses=self._responses(entry.get("response")),
                    server_url=origin if origin != base_origin else None,
                )
            )

        if skipped:
            logger.info("Skipped %d HAR entries", skipped)

        return ParsedSpec(
            title=str(creator.get("name") or "HAR Capture"),
            version=str(creator.get("version") or log.get("version") or "1.2"),
            spec_type="har",
            base_url=base_origin,
            operations=operations,
            spec=har,
        )

    def _is_static(self, path: str) -> bool:
        match = _EXTENSION_PATTERN.search(os.path.basename(path))
        return bool(match) and match.group(0).lower() in STATIC_EXTENSIONS

    def _query_parameters(self, query: str) -> list[Parameter]:
        return [
            Parameter(name=name, location="query", required=True, example=value)
            for name, value in parse_qsl(query, keep_blank_values=True)
        ]

    def _header_parameters(self, request: dict[str, Any]) -> list[Parameter]:
        params = []
        for header in request.get("headers") or []:
            if not isinstance(header, dict):
                continue
            name = str(header.get("name", ""))
            if not name or name.startswith(":") or name.lower() in SKIPPED_HEADERS:
                continue
            params.append(Parameter(name=name, location="header", example=str(header.get("value", ""))))
        return params

    def _request_body(self, post_data: Any) -> Optional[RequestBody]:
        """Turn HAR postData into a RequestBody carrying the recorded text as example."""
        if not isinstance(post_data, dict):
            return None

        mime_type = str(post_data.get("mimeType") or "application/octet-stream").split(";")[0].strip()
        text = post_data.get("text")
        if text is None and isinstance(post_data.get("params"), list):
            text = "&".join(
                f"{p.get('name', '')}={p.get('value', '')}"
                for p in post_data["params"]
                if isinstance(p, dict)
            )
        if not text:
            return None

        example: Any = text
        if "json" in mime_type.lower():
            try:
                example = json.loads(text)
            except json.JSONDecodeError:
                logger.debug("Recorded %s body is not valid JSON, keeping raw text", mime_type)

        return RequestBody(content={mime_type: MediaType(example=example)}, required=True)

    def _responses(self, response: Any) -> dict[str, Any]:
        if not isinstance(response, dict) or not response.get("status"):
            return {}
        return {str(response["status"]): {"description": str(response.get("statusText") or "")}}
