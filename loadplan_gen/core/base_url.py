"""Base URL resolution for OpenAPI 3.x and Swagger 2.0 documents.

Provides resolution of the effective base URL from a parsed document and a
fallback URL splitter that always yields protocol, domain, port and path,
even for malformed input.
"""

import logging
import re
from typing import Any, Optional
from urllib.parse import urlsplit

from loadplan_gen.core.data_structures import UrlParts
from loadplan_gen.core.spec_loader import parse_spec_text
from loadplan_gen.exceptions import SpecParseException

logger = logging.getLogger(__name__)

# Host used for relative server URLs such as "/v2"
RELATIVE_SERVER_ORIGIN = "https://localhost"

DEFAULT_SWAGGER_SCHEME = "https"

_PROTOCOL_PREFIX = re.compile(r"^https?://", re.IGNORECASE)


def resolve_base_url(spec: dict[str, Any]) -> Optional[str]:
    """Determine the base URL declared by a spec.

    Preference order:
    1. OpenAPI 3.x servers[0].url (relative URLs are placed on https://localhost)
    2. Swagger 2.0 scheme://host + basePath (scheme defaults to https)
    3. None when neither is declared

    Args:
        spec: Parsed OpenAPI/Swagger document

    Returns:
        Base URL string or None

    Example:
        >>> resolve_base_url({"servers": [{"url": "/v2"}]})
        'https://localhost/v2'
        >>> resolve_base_url({"host": "api.x.com", "schemes": ["http"], "basePath": "/v1"})
        'http://api.x.com/v1'
    """
    servers = spec.get("servers")
    if isinstance(servers, list) and servers:
        first = servers[0]
        url = first.get("url") if isinstance(first, dict) else None
        if isinstance(url, str) and url:
            if url.startswith("/"):
                return f"{RELATIVE_SERVER_ORIGIN}{url}"
            return url

    host = spec.get("host")
    if isinstance(host, str) and host:
        schemes = spec.get("schemes")
        scheme = DEFAULT_SWAGGER_SCHEME
        if isinstance(schemes, list) and schemes and schemes[0]:
            scheme = str(schemes[0])
        base_path = spec.get("basePath") or ""
        return f"{scheme}://{host}{base_path}"

    return None


def extract_base_url(spec_text: str) -> Optional[str]:
    """Resolve the base URL straight from raw spec text.

    Unparseable text yields None rather than an error.
    """
    try:
        spec = parse_spec_text(spec_text)
    except SpecParseException:
        logger.warning("Could not parse spec text while looking for a base URL")
        return None
    return resolve_base_url(spec)


def parse_url_parts(url: str) -> UrlParts:
    """Split a URL into protocol, domain, port and path.

    Never raises. Tries a strict parse first, then retries with an https://
    prefix, and finally splits host, port and path by hand.

    Args:
        url: Absolute or scheme-less URL, possibly malformed

    Returns:
        UrlParts with port defaulted to 443/80 by protocol

    Example:
        >>> parse_url_parts("http://localhost:8080/api/")
        UrlParts(protocol='http', domain='localhost', port='8080', path='/api')
        >>> parse_url_parts("api.example.com/v1")
        UrlParts(protocol='https', domain='api.example.com', port='443', path='/v1')
    """
    try:
        return _strict_parse(url)
    except ValueError:
        pass

    cleaned = (url or "").strip()
    if not _PROTOCOL_PREFIX.match(cleaned):
        cleaned = f"https://{cleaned}"
    try:
        return _strict_parse(cleaned)
    except ValueError:
        logger.debug("Falling back to manual URL split for %r", url)

    return _manual_split(cleaned)


def _strict_parse(url: str) -> UrlParts:
    parsed = urlsplit(url)
    if not parsed.scheme or not parsed.hostname:
        raise ValueError(f"Not an absolute URL: {url!r}")

    protocol = parsed.scheme.lower()
    port = parsed.port  # raises ValueError on a non-numeric port
    path = parsed.path
    if path == "/":
        path = ""
    elif path.endswith("/"):
        path = path[:-1]

    return UrlParts(
        protocol=protocol,
        domain=parsed.hostname,
        port=str(port) if port is not None else _default_port(protocol),
        path=path,
    )


def _manual_split(url: str) -> UrlParts:
    protocol = "http" if url.lower().startswith("http://") else "https"
    without_protocol = _PROTOCOL_PREFIX.sub("", url)
    host_port, _, rest = without_protocol.partition("/")
    host, _, port = host_port.partition(":")

    return UrlParts(
        protocol=protocol,
        domain=host or "localhost",
        port=port if port.isdigit() else _default_port(protocol),
        path=f"/{rest}" if rest else "",
    )


def _default_port(protocol: str) -> str:
    return "443" if protocol == "https" else "80"
