"""Loading of raw specification and HAR documents.

Spec text may be JSON or YAML; the format is detected from the first
non-blank character. HAR captures are always JSON.
"""

import json
import logging
from pathlib import Path
from typing import Any

import yaml

from loadplan_gen.exceptions import InvalidHarException, SpecParseException

logger = logging.getLogger(__name__)

INVALID_SPEC_MESSAGE = "Invalid Swagger/OpenAPI format"
INVALID_HAR_MESSAGE = "Invalid HAR file format"


def parse_spec_text(text: str) -> dict[str, Any]:
    """Parse OpenAPI/Swagger text into a mapping.

    Args:
        text: Raw JSON or YAML text

    Returns:
        Parsed document

    Raises:
        SpecParseException: If the text is not valid JSON/YAML or not a mapping
    """
    stripped = text.strip()
    try:
        if stripped.startswith("{"):
            spec = json.loads(stripped)
        else:
            spec = yaml.safe_load(stripped)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        logger.debug("Spec text failed to parse: %s", e)
        raise SpecParseException(INVALID_SPEC_MESSAGE) from e

    if not isinstance(spec, dict):
        logger.debug("Spec text parsed to %s, expected a mapping", type(spec).__name__)
        raise SpecParseException(INVALID_SPEC_MESSAGE)

    return spec


def load_spec_file(spec_path: str) -> dict[str, Any]:
    """Read and parse a spec file (any extension).

    Raises:
        FileNotFoundError: Spec file doesn't exist
        SpecParseException: File content is not a valid spec document
    """
    spec_file = Path(spec_path)
    if not spec_file.exists():
        raise FileNotFoundError(f"Spec file not found: {spec_path}")

    try:
        text = spec_file.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise SpecParseException(INVALID_SPEC_MESSAGE) from e

    return parse_spec_text(text)


def parse_har_text(text: str) -> dict[str, Any]:
    """Parse HAR capture text and check its basic shape.

    A HAR document is valid when it has a 'log' object holding an
    'entries' list.

    Raises:
        InvalidHarException: If the text is not JSON or lacks log.entries
    """
    try:
        har = json.loads(text)
    except json.JSONDecodeError as e:
        raise InvalidHarException(INVALID_HAR_MESSAGE) from e

    if not isinstance(har, dict):
        raise InvalidHarException(INVALID_HAR_MESSAGE)

    log = har.get("log")
    if not isinstance(log, dict) or not isinstance(log.get("entries"), list):
        raise InvalidHarException(INVALID_HAR_MESSAGE)

    return har


def load_har_file(har_path: str) -> dict[str, Any]:
    """Read and parse a HAR file.

    Raises:
        FileNotFoundError: HAR file doesn't exist
        InvalidHarException: File content is not a valid HAR document
    """
    har_file = Path(har_path)
    if not har_file.exists():
        raise FileNotFoundError(f"HAR file not found: {har_path}")

    return parse_har_text(har_file.read_text(encoding="utf-8", errors="replace"))
