"""Core modules for the load plan generator."""

from loadplan_gen.core.base_url import extract_base_url, parse_url_parts, resolve_base_url
from loadplan_gen.core.csv_synthesizer import CSV_HEADERS, CsvTestCaseSynthesizer
from loadplan_gen.core.data_structures import (
    CsvTestCaseRow,
    MediaType,
    Operation,
    Parameter,
    ParsedSpec,
    RequestBody,
    SecurityScheme,
    UrlParts,
)
from loadplan_gen.core.har_parser import HARParser
from loadplan_gen.core.jmx_generator import JMXGenerator
from loadplan_gen.core.jmx_validator import JMXValidator
from loadplan_gen.core.load_config import LoadConfig, load_config_file
from loadplan_gen.core.openapi_parser import OpenAPIParser
from loadplan_gen.core.sample_generator import SampleGenerator
from loadplan_gen.core.schema_model import SchemaNode
from loadplan_gen.core.spec_loader import load_har_file, load_spec_file, parse_har_text, parse_spec_text

__all__ = [
    # Loading and parsing
    "parse_spec_text",
    "load_spec_file",
    "parse_har_text",
    "load_har_file",
    "OpenAPIParser",
    "HARParser",
    "resolve_base_url",
    "extract_base_url",
    "parse_url_parts",
    # Generation
    "SampleGenerator",
    "JMXGenerator",
    "JMXValidator",
    "CsvTestCaseSynthesizer",
    "CSV_HEADERS",
    "LoadConfig",
    "load_config_file",
    # Data structures
    "SchemaNode",
    "ParsedSpec",
    "Operation",
    "Parameter",
    "RequestBody",
    "MediaType",
    "SecurityScheme",
    "UrlParts",
    "CsvTestCaseRow",
]
