"""Custom exceptions for the load plan generator.

This module defines the exception hierarchy for the load plan generator.
All custom exceptions inherit from LoadPlanGenException base class.
"""


class LoadPlanGenException(Exception):
    """Base exception for all load plan generator errors.

    All custom exceptions in the generator inherit from this base class
    to allow catching all tool-specific errors.
    """

    pass


class SpecParseException(LoadPlanGenException):
    """Raised when specification text cannot be parsed.

    This exception is raised when:
    - JSON or YAML syntax is invalid
    - Parsed document is not a mapping
    - Spec file cannot be decoded as UTF-8
    """

    pass


class InvalidHarException(LoadPlanGenException):
    """Raised when a HAR capture is malformed.

    This exception is raised when:
    - HAR text is not valid JSON
    - Document has no 'log' object
    - 'log.entries' is missing or not a list
    """

    pass


class ConfigException(LoadPlanGenException):
    """Raised when load configuration is invalid.

    This exception is raised when:
    - Thread count, loop count or timeouts are out of range
    - Grouping strategy is not recognized
    - Config file is not a YAML mapping or has unknown keys
    """

    pass


class PlanGenerationException(LoadPlanGenException):
    """Raised when JMX test plan generation fails.

    This exception is raised when:
    - No operations are available to generate samplers from
    - Failed to build or serialize the XML tree
    - Failed to write the JMX file to disk
    """

    pass


class CsvSynthesisException(LoadPlanGenException):
    """Raised when CSV test case synthesis fails.

    This exception is raised when:
    - No operations are available to enumerate
    - Failed to write the CSV file to disk
    """

    pass


class JMXValidationException(LoadPlanGenException):
    """Raised when JMX validation encounters critical errors.

    This exception is raised when:
    - XML parsing fails
    - JMX file structure is critically malformed
    """

    pass
