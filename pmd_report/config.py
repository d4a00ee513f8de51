"""Configuration loading and validation.

Usage:
    config = load("pmd-report.yaml")         # raises ConfigError on bad config
    config = load()                          # ./pmd-report.yaml if present, else defaults
    generate_template("pmd-report.yaml")     # writes example file to disk
"""

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from pmd_report.check import DEFAULT_FAILURE_PRIORITY, MAX_PRIORITY, MIN_PRIORITY, PMD_RESULTS_FILE

DEFAULT_CONFIG_PATH = "pmd-report.yaml"

_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------

class ConfigError(Exception):
    """Raised when the configuration is missing or invalid."""


# ---------------------------------------------------------------------------
# Config dataclass
# ---------------------------------------------------------------------------

@dataclass
class Config:
    target_directory: str = "target"
    results_file: str = PMD_RESULTS_FILE
    failure_priority: int = DEFAULT_FAILURE_PRIORITY
    skip: bool = False
    fail_on_violation: bool = True
    verbose: bool = False


# ---------------------------------------------------------------------------
# Loader
# ---------------------------------------------------------------------------

def load(config_path: str | None = None) -> Config:
    """Load and validate configuration from a YAML file.

    With no *config_path*, ``pmd-report.yaml`` in the working directory is
    used when it exists; otherwise the defaults apply.

    Environment variables PMD_SKIP, PMD_FAILURE_PRIORITY and PMD_VERBOSE
    override file values.

    Raises:
        ConfigError: if an explicit file is missing, the file is malformed,
                     or a value is out of range.
    """
    raw: dict = {}

    if config_path is None:
        if Path(DEFAULT_CONFIG_PATH).exists():
            raw = _read(DEFAULT_CONFIG_PATH)
    else:
        if not Path(config_path).exists():
            raise ConfigError(
                f"Config file not found: '{config_path}'\n"
                "Run `python -m pmd_report init` to generate a template."
            )
        raw = _read(config_path)

    check = raw.get("check") or {}
    if not isinstance(check, dict):
        raise ConfigError("'check' must be a YAML mapping.")

    defaults = Config()
    config = Config(
        target_directory=str(check.get("target_directory", defaults.target_directory)),
        results_file=str(check.get("results_file", defaults.results_file)),
        failure_priority=check.get("failure_priority", defaults.failure_priority),
        skip=_as_bool(check.get("skip", defaults.skip), "check.skip"),
        fail_on_violation=_as_bool(
            check.get("fail_on_violation", defaults.fail_on_violation), "check.fail_on_violation"
        ),
        verbose=_as_bool(check.get("verbose", defaults.verbose), "check.verbose"),
    )

    if "PMD_SKIP" in os.environ:
        config.skip = _as_bool(os.environ["PMD_SKIP"], "PMD_SKIP")
    if "PMD_VERBOSE" in os.environ:
        config.verbose = _as_bool(os.environ["PMD_VERBOSE"], "PMD_VERBOSE")
    if os.environ.get("PMD_FAILURE_PRIORITY"):
        config.failure_priority = os.environ["PMD_FAILURE_PRIORITY"].strip()

    _validate(config)
    return config


def _read(config_path: str) -> dict:
    try:
        with Path(config_path).open(encoding="utf-8") as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse '{config_path}': {exc}") from exc

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(f"'{config_path}' must be a YAML mapping at the top level.")
    return raw


def _as_bool(value, name: str) -> bool:
    """Return *value* as a bool. Strings must be one of the known yes/no words."""
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_VALUES:
            return True
        if word in _FALSE_VALUES:
            return False
    raise ConfigError(f"Invalid configuration:\n  - '{name}' must be a boolean, got {value!r}")


def _validate(config: Config) -> None:
    """Raise ConfigError if a value is invalid. Coerces failure_priority to int.

    A skipped check is not validated further.
    """
    if config.skip:
        return

    errors: list[str] = []

    try:
        config.failure_priority = int(config.failure_priority)
    except (TypeError, ValueError):
        errors.append(
            f"  - 'check.failure_priority' must be an integer, got {config.failure_priority!r}"
        )
    else:
        if not MAX_PRIORITY <= config.failure_priority <= MIN_PRIORITY:
            errors.append(
                f"  - 'check.failure_priority' must be between {MAX_PRIORITY} "
                f"and {MIN_PRIORITY}, got {config.failure_priority}"
            )

    if not config.results_file:
        errors.append("  - 'check.results_file' is empty")

    if errors:
        raise ConfigError("Invalid configuration:\n" + "\n".join(errors))


# ---------------------------------------------------------------------------
# Template generator (used by `init` command)
# ---------------------------------------------------------------------------

TEMPLATE = """\
check:
  target_directory: "target"      # Directory holding the analyzer output
  results_file: "pmd.xml"
  failure_priority: 5             # Fail on priorities <= this (0 strictest, 5 loosest)
  skip: false
  fail_on_violation: true
  verbose: false                  # Also log violations below the threshold
"""


def generate_template(output_path: str = DEFAULT_CONFIG_PATH) -> None:
    """Write a template pmd-report.yaml to *output_path*.

    Raises:
        ConfigError: if the file already exists.
    """
    path = Path(output_path)
    if path.exists():
        raise ConfigError(
            f"'{output_path}' already exists. Remove it first or choose a different path."
        )
    path.write_text(TEMPLATE, encoding="utf-8")
