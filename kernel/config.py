"""
kernel/config.py — Project paths and configuration constants.

All tunable settings live here. Modules import the constants directly;
``load_settings()`` layers an optional ``.auditor.yaml`` file and environment
variables on top of them for the CLI and the wiring layer.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger("auditor.config")

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------

ROOT = Path(__file__).parent.parent.resolve()
CONFIG_FILE_NAME = ".auditor.yaml"
CORPUS_FILE = ROOT / "modules" / "benchmark" / "corpus.yaml"

# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

# Oracle command. Change this if using a different agent CLI
ORACLE_CMD = "claude"

# Upper bound on a single oracle call (seconds)
ORACLE_TIMEOUT_SECONDS = 30.0

# Confidence reported for a heuristic-only guess
HEURISTIC_CONFIDENCE = 0.7

# Confidence reported when the oracle says "unknown" but heuristics had a guess
HEURISTIC_FALLBACK_CONFIDENCE = 0.5

# Maximum number of ranked alternatives kept from the oracle
MAX_ALTERNATIVES = 3

# ---------------------------------------------------------------------------
# Measurement
# ---------------------------------------------------------------------------

DEFAULT_SIZES: tuple[int, ...] = (100, 500, 1_000, 5_000, 10_000)

# Points needed before a log-log fit is attempted
MIN_COMPLEXITY_POINTS = 3

# ---------------------------------------------------------------------------
# Benchmark
# ---------------------------------------------------------------------------

BENCHMARK_CONCURRENCY = 1

# Ceiling on oracle calls per second when the corpus is run oracle-backed
BENCHMARK_MAX_CALLS_PER_SECOND = 2.0


@dataclass(frozen=True)
class Settings:
    """Effective runtime settings after file and environment overrides."""

    oracle_cmd: str = ORACLE_CMD
    oracle_timeout: float = ORACLE_TIMEOUT_SECONDS
    use_oracle: bool = False
    benchmark_concurrency: int = BENCHMARK_CONCURRENCY
    benchmark_max_calls_per_second: float = BENCHMARK_MAX_CALLS_PER_SECOND
    log_level: str = "WARNING"


_ENV_OVERRIDES: dict[str, str] = {
    "AUDITOR_ORACLE_CMD": "oracle_cmd",
    "AUDITOR_ORACLE_TIMEOUT": "oracle_timeout",
    "AUDITOR_USE_ORACLE": "use_oracle",
    "AUDITOR_LOG_LEVEL": "log_level",
}


def _coerce(name: str, value: Any) -> Any:
    """Convert a raw YAML/env value to the type of the named setting."""
    if name in ("oracle_cmd", "log_level"):
        return str(value)
    if name in ("oracle_timeout", "benchmark_max_calls_per_second"):
        return float(value)
    if name == "benchmark_concurrency":
        return max(1, int(value))
    if name == "use_oracle":
        if isinstance(value, str):
            return value.strip().lower() in ("1", "true", "yes", "on")
        return bool(value)
    return value


def load_settings(path: Path | None = None, env: dict[str, str] | None = None) -> Settings:
    """Build ``Settings`` from defaults, an optional YAML file and the environment.

    Args:
        path: YAML file to read. Defaults to ``.auditor.yaml`` in the
            current working directory; a missing file is not an error.
        env: Environment mapping (defaults to ``os.environ``).

    Returns:
        The effective settings. Unknown keys are ignored with a warning.

    Raises:
        ValueError: A known key holds a value of the wrong type.
    """
    settings = Settings()
    known = {f.name for f in fields(Settings)}

    config_path = path if path is not None else Path.cwd() / CONFIG_FILE_NAME
    if config_path.exists():
        data: dict[str, Any] = yaml.safe_load(config_path.read_text()) or {}
        overrides: dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown config key %r in %s", key, config_path)
                continue
            overrides[key] = _coerce(key, value)
        settings = replace(settings, **overrides)
        logger.debug("Loaded settings from %s", config_path)

    environ = os.environ if env is None else env
    env_overrides = {
        name: _coerce(name, environ[var]) for var, name in _ENV_OVERRIDES.items() if var in environ
    }
    if env_overrides:
        settings = replace(settings, **env_overrides)

    return settings
