"""Load Plan Generator - Generate JMeter test plans and test case sheets from API specs."""

__version__ = "1.0.0"

from loadplan_gen.core.csv_synthesizer import CsvTestCaseSynthesizer
from loadplan_gen.core.har_parser import HARParser
from loadplan_gen.core.jmx_generator import JMXGenerator
from loadplan_gen.core.jmx_validator import JMXValidator
from loadplan_gen.core.load_config import LoadConfig
from loadplan_gen.core.openapi_parser import OpenAPIParser

__all__ = [
    "OpenAPIParser",
    "HARParser",
    "LoadConfig",
    "JMXGenerator",
    "JMXValidator",
    "CsvTestCaseSynthesizer",
]
