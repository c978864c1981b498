from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration loading or validation fails."""

    pass


@dataclass
class AnalyzerConfig:
    """Rolling buffer size and suggestion rate limit."""

    max_buffer: int = 5000
    cooldown_ms: int = 5000


@dataclass
class WatchConfig:
    """Settings for the PTY-hosted command being watched."""

    poll_interval_ms: int = 300
    env: dict[str, str] = field(default_factory=dict)


@dataclass
class DebugConfig:
    """Debug mode settings."""

    enabled: bool = False
    trace: bool = False
    verbose: bool = False


@dataclass
class AppConfig:
    """Top-level configuration aggregating all subsections."""

    analyzer: AnalyzerConfig = field(default_factory=AnalyzerConfig)
    watch: WatchConfig = field(default_factory=WatchConfig)
    debug: DebugConfig = field(default_factory=DebugConfig)


def _positive_int(section: dict, key: str, default: int, prefix: str) -> int:
    value = section.get(key, default)
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{prefix}.{key} must be a positive integer, got {value!r}")
    return value


def load_config(path: str | None) -> AppConfig:
    """Load and validate configuration from a YAML file.

    Every section is optional; anything left out keeps its default. With
    no path at all the defaults are returned as-is.

    Args:
        path: Filesystem path to the YAML file, or None for defaults.

    Returns:
        A fully populated AppConfig instance.

    Raises:
        ConfigError: If the file does not exist, is not a mapping, or
            holds a non-positive buffer size, cooldown or poll interval.
    """
    if path is None:
        return AppConfig()

    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {path}")

    with open(config_path) as f:
        raw = yaml.safe_load(f) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config file must contain a mapping: {path}")

    # `or {}` fallback handles YAML null values for optional sections
    analyzer_raw = raw.get("analyzer", {}) or {}
    watch_raw = raw.get("watch", {}) or {}
    debug_raw = raw.get("debug", {}) or {}

    config = AppConfig(
        analyzer=AnalyzerConfig(
            max_buffer=_positive_int(analyzer_raw, "max_buffer", 5000, "analyzer"),
            cooldown_ms=_positive_int(analyzer_raw, "cooldown_ms", 5000, "analyzer"),
        ),
        watch=WatchConfig(
            poll_interval_ms=_positive_int(watch_raw, "poll_interval_ms", 300, "watch"),
            env={str(k): str(v) for k, v in (watch_raw.get("env", {}) or {}).items()},
        ),
        debug=DebugConfig(
            enabled=bool(debug_raw.get("enabled", False)),
            trace=bool(debug_raw.get("trace", False)),
            verbose=bool(debug_raw.get("verbose", False)),
        ),
    )
    logger.debug(
        "Loaded config from %s max_buffer=%d cooldown_ms=%d",
        path, config.analyzer.max_buffer, config.analyzer.cooldown_ms,
    )
    return config
