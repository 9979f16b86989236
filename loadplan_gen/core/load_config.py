"""Load configuration for generated test plans.

This module defines the LoadConfig dataclass (thread group sizing, grouping
strategy, feature flags, timeouts and thresholds) and loading of that
configuration from YAML files.
"""

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Optional

import yaml

from loadplan_gen.exceptions import ConfigException

GROUP_BY_TAG = "tag"
GROUP_BY_PATH = "path"
GROUPING_STRATEGIES = (GROUP_BY_TAG, GROUP_BY_PATH)

# Optional top-level key wrapping the settings in a config file
CONFIG_SECTION = "load_config"


@dataclass
class LoadConfig:
    """Test execution parameters for a generated plan.

    Attributes:
        test_plan_name: Name of the TestPlan element
        thread_count: Virtual users per thread group
        ramp_up: Ramp-up period in seconds
        loop_count: Iterations per thread (ignored when duration is set)
        duration: Scheduler duration in seconds (None = loop-based)
        grouping: "tag" (first tag) or "path" (first path segment)
        add_assertions: Attach a 2xx response code assertion to each sampler
        add_correlation: Attach JSON extractors for id-like response fields
        add_auth: Add header/auth managers for declared security schemes
        generate_csv_config: Add a CSV Data Set Config element
        csv_file_name: File name used by the CSV Data Set Config
        csv_variable_names: Comma-separated variable names for the CSV Data Set Config
        connection_timeout: Sampler connect timeout in milliseconds
        response_timeout: Sampler response timeout in milliseconds
        follow_redirects: Sampler follow_redirects flag
        use_keep_alive: Sampler use_keepalive flag
        response_time_threshold: Max response time in ms (adds Duration Assertions)
        throughput_threshold: Expected requests per second (recorded in plan comments)
        error_rate_threshold: Acceptable error percentage (recorded in plan comments)
        enable_reporting: Add Summary Report and Aggregate Report listeners
    """

    test_plan_name: str = "API Performance Test"
    thread_count: int = 10
    ramp_up: int = 10
    loop_count: int = 1
    duration: Optional[int] = None
    grouping: str = GROUP_BY_TAG
    add_assertions: bool = True
    add_correlation: bool = False
    add_auth: bool = True
    generate_csv_config: bool = False
    csv_file_name: str = "test-data.csv"
    csv_variable_names: str = "userId,orderId,productId,email"
    connection_timeout: int = 30000
    response_timeout: int = 30000
    follow_redirects: bool = True
    use_keep_alive: bool = True
    response_time_threshold: Optional[int] = None
    throughput_threshold: Optional[float] = None
    error_rate_threshold: Optional[float] = None
    enable_reporting: bool = False

    def __post_init__(self) -> None:
        """Validate value ranges after initialization."""
        if self.thread_count < 1:
            raise ConfigException(f"thread_count must be >= 1 (found: {self.thread_count})")
        if self.ramp_up < 0:
            raise ConfigException(f"ramp_up must be >= 0 (found: {self.ramp_up})")
        if self.loop_count < 1 and self.loop_count != -1:
            raise ConfigException(
                f"loop_count must be >= 1, or -1 for infinite (found: {self.loop_count})"
            )
        if self.duration is not None and self.duration < 1:
            raise ConfigException(f"duration must be >= 1 second (found: {self.duration})")
        if self.grouping not in GROUPING_STRATEGIES:
            raise ConfigException(
                f"Unknown grouping '{self.grouping}'. Expected one of: {', '.join(GROUPING_STRATEGIES)}"
            )
        for name in ("connection_timeout", "response_timeout"):
            if getattr(self, name) < 0:
                raise ConfigException(f"{name} must be >= 0 (found: {getattr(self, name)})")
        if self.response_time_threshold is not None and self.response_time_threshold < 1:
            raise ConfigException(
                f"response_time_threshold must be >= 1 ms (found: {self.response_time_threshold})"
            )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LoadConfig":
        """Build a config from a mapping of field names to values.

        Raises:
            ConfigException: Unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigException(f"Unknown load config keys: {', '.join(unknown)}")
        try:
            return cls(**data)
        except TypeError as e:
            raise ConfigException(f"Invalid load config: {e}") from e

    def with_overrides(self, **overrides: Any) -> "LoadConfig":
        """Return a copy with the non-None overrides applied."""
        values = self.to_dict()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return LoadConfig.from_dict(values)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


def load_config_file(config_path: str) -> LoadConfig:
    """Read a LoadConfig from a YAML file.

    The settings may sit at the top level or under a 'load_config' key.

    Args:
        config_path: Path to YAML config file

    Returns:
        LoadConfig instance

    Raises:
        FileNotFoundError: Config file doesn't exist
        ConfigException: YAML is invalid or settings are invalid
    """
    config_file = Path(config_path)
    if not config_file.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    try:
        with open(config_file, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigException(f"Invalid YAML syntax in {config_path}: {e}") from e

    if data is None:
        return LoadConfig()
    if isinstance(data, dict) and CONFIG_SECTION in data:
        data = data[CONFIG_SECTION]
    if not isinstance(data, dict):
        raise ConfigException(f"Config file {config_path} must contain a mapping")

    return LoadConfig.from_dict(data)
