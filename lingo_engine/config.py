"""
Configuration management for the Lingo localization engine.

Loads configuration from YAML file with environment variable overrides.
Environment variables use the pattern: LINGO_<SECTION>_<KEY>
Example: LINGO_ENGINE_BATCH_SIZE overrides engine.batch_size
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union
from urllib.parse import urlparse

import yaml

from lingo_engine.errors import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://engine.lingo.dev"

# Default config file locations (searched in order)
DEFAULT_CONFIG_PATHS = [
    Path("./lingo.yaml"),
    Path("./lingo.yml"),
    Path("./config.yaml"),
    Path.home() / ".lingo" / "config.yaml",
]

# Inclusive bounds for the batching limits
BATCH_SIZE_RANGE = (1, 250)
IDEAL_BATCH_ITEM_SIZE_RANGE = (1, 2500)

# camelCase spellings accepted in mappings
_ENGINE_KEY_ALIASES = {
    "apiKey": "api_key",
    "apiUrl": "api_url",
    "batchSize": "batch_size",
    "idealBatchItemSize": "ideal_batch_item_size",
    "requestTimeout": "request_timeout",
}


def _get_env_override(section: str, key: str) -> Optional[str]:
    """Get environment variable override for a config key."""
    env_key = f"LINGO_{section.upper()}_{key.upper()}"
    return os.environ.get(env_key)


def _parse_bool(value: Union[str, bool]) -> bool:
    """Parse boolean from string or bool."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in ("1", "true", "yes", "y", "on")


def _parse_int(value: Union[str, int], default: int) -> int:
    """Parse integer from string or int."""
    if isinstance(value, int):
        return value
    try:
        return int(str(value).strip())
    except (ValueError, TypeError):
        return default


def _parse_float(value: Union[str, float], default: float) -> float:
    """Parse float from string or float."""
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip())
    except (ValueError, TypeError):
        return default


def _get_config_value(
    data: Dict[str, Any],
    section: str,
    key: str,
    default: Any,
    parser: Optional[callable] = None,
) -> Any:
    """Get config value with environment override support."""
    env_value = _get_env_override(section, key)
    if env_value is not None:
        value = env_value
    else:
        section_data = data.get(section, {})
        if isinstance(section_data, dict):
            value = section_data.get(key, default)
        else:
            value = default

    if parser and value is not None:
        if parser in (_parse_int, _parse_float):
            return parser(value, default)
        return parser(value)

    return value


def _check_int_range(name: str, value: Any, bounds: tuple) -> None:
    low, high = bounds
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer, got {value!r}")
    if not low <= value <= high:
        raise ValidationError(f"{name} must be between {low} and {high}, got {value}")


@dataclass(frozen=True)
class EngineConfig:
    """
    Engine connection and batching configuration.

    Unrecognized fields passed through from_dict() are kept in ``extra``
    and otherwise ignored.
    """
    api_key: str
    api_url: str = DEFAULT_API_URL
    # Maximum number of entries per chunk
    batch_size: int = 25
    # Soft word-count cap per chunk
    ideal_batch_item_size: int = 250
    # Seconds before an HTTP request to the provider times out
    request_timeout: float = 60.0
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.api_key, str) or not self.api_key:
            raise ValidationError("api_key is required")

        parsed = urlparse(self.api_url) if isinstance(self.api_url, str) else None
        if parsed is None or parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationError(f"api_url must be an http(s) URL, got {self.api_url!r}")

        _check_int_range("batch_size", self.batch_size, BATCH_SIZE_RANGE)
        _check_int_range(
            "ideal_batch_item_size", self.ideal_batch_item_size, IDEAL_BATCH_ITEM_SIZE_RANGE
        )

        if not isinstance(self.request_timeout, (int, float)) or self.request_timeout <= 0:
            raise ValidationError(
                f"request_timeout must be a positive number, got {self.request_timeout!r}"
            )

    @property
    def base_url(self) -> str:
        """API URL without a trailing slash."""
        return self.api_url.rstrip("/")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EngineConfig":
        """
        Build config from a mapping with snake_case or camelCase keys.

        Args:
            data: Configuration values

        Returns:
            EngineConfig instance

        Raises:
            ValidationError: If a value is missing or out of range
        """
        if not isinstance(data, Mapping):
            raise ValidationError("Engine configuration must be a mapping")

        known: Dict[str, Any] = {}
        extra: Dict[str, Any] = {}
        for key, value in data.items():
            name = _ENGINE_KEY_ALIASES.get(key, key)
            if name in ("api_key", "api_url", "batch_size", "ideal_batch_item_size", "request_timeout"):
                if value is not None:
                    known[name] = value
            else:
                extra[key] = value

        if "api_key" not in known:
            raise ValidationError("api_key is required")

        return cls(extra=extra, **known)


@dataclass(frozen=True)
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: str = ""
    quiet_third_party: bool = True


@dataclass(frozen=True)
class AppConfig:
    """Main application configuration."""
    engine: EngineConfig
    logging: LoggingConfig


def find_config_file(config_path: Optional[str] = None) -> Optional[Path]:
    """Find configuration file from explicit path or default locations."""
    if config_path:
        path = Path(config_path)
        if path.exists():
            return path
        logger.warning(f"Config file not found at specified path: {config_path}")
        return None

    for path in DEFAULT_CONFIG_PATHS:
        if path.exists():
            logger.info(f"Found config file: {path}")
            return path

    return None


def load_yaml_config(path: Path) -> Dict[str, Any]:
    """Load YAML configuration file."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError) as e:
        logger.error(f"Failed to load config file {path}: {e}")
        return {}


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load application configuration.

    Priority (highest to lowest):
    1. Environment variables (LINGO_<SECTION>_<KEY>)
    2. Config file values
    3. Default values

    Args:
        config_path: Optional explicit path to config file

    Returns:
        AppConfig instance

    Raises:
        ValidationError: If required configuration is missing or invalid
    """
    config_file = find_config_file(config_path)
    data = load_yaml_config(config_file) if config_file else {}

    engine_section = data.get("engine", {})
    if isinstance(engine_section, dict):
        # camelCase spellings read the same as snake_case
        engine_section = {_ENGINE_KEY_ALIASES.get(k, k): v for k, v in engine_section.items()}
        data = {**data, "engine": engine_section}

    api_key = _get_config_value(data, "engine", "api_key", "")
    if not api_key:
        api_key = os.environ.get("LINGO_API_KEY", "")
    if not api_key:
        raise ValidationError(
            "Missing API key. Set LINGO_ENGINE_API_KEY or LINGO_API_KEY "
            "environment variable, or set engine.api_key in config file."
        )

    known = set(_ENGINE_KEY_ALIASES.values())
    extra = {
        k: v for k, v in engine_section.items() if k not in known
    } if isinstance(engine_section, dict) else {}

    engine = EngineConfig(
        api_key=api_key,
        api_url=_get_config_value(data, "engine", "api_url", DEFAULT_API_URL),
        batch_size=_get_config_value(data, "engine", "batch_size", 25, _parse_int),
        ideal_batch_item_size=_get_config_value(
            data, "engine", "ideal_batch_item_size", 250, _parse_int
        ),
        request_timeout=_get_config_value(data, "engine", "request_timeout", 60.0, _parse_float),
        extra=extra,
    )

    logging_config = LoggingConfig(
        level=_get_config_value(data, "logging", "level", "INFO"),
        format=_get_config_value(data, "logging", "format", LoggingConfig.format),
        file=_get_config_value(data, "logging", "file", ""),
        quiet_third_party=_get_config_value(data, "logging", "quiet_third_party", True, _parse_bool),
    )

    return AppConfig(engine=engine, logging=logging_config)


def setup_logging(config: LoggingConfig) -> None:
    """Configure application logging based on config."""
    handlers = []

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(config.format))
    handlers.append(console_handler)

    if config.file:
        file_path = Path(config.file)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.file)
        file_handler.setFormatter(logging.Formatter(config.format))
        handlers.append(file_handler)

    logging.basicConfig(
        level=getattr(logging, config.level.upper(), logging.INFO),
        handlers=handlers,
        force=True,
    )

    if config.quiet_third_party:
        for logger_name in ("urllib3", "requests", "charset_normalizer"):
            logging.getLogger(logger_name).setLevel(logging.WARNING)


def config_to_dict(config: AppConfig) -> Dict[str, Any]:
    """Convert AppConfig to dictionary (for serialization/logging)."""
    from dataclasses import asdict

    result = asdict(config)
    if "engine" in result and "api_key" in result["engine"]:
        result["engine"]["api_key"] = "***REDACTED***"
    return result
