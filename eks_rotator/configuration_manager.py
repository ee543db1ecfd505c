#!/usr/bin/env python3
"""Configuration Manager module for rotation settings and YAML config files."""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigurationError

DEFAULT_JOIN_POLL_INTERVAL = 30
DEFAULT_READY_POLL_INTERVAL = 10
DEFAULT_DRAIN_TIMEOUT = 600


@dataclass(frozen=True)
class RotationSettings:
    """Tunables for one rotation run. Every field may be set from a YAML config file."""

    join_poll_interval: float = DEFAULT_JOIN_POLL_INTERVAL
    ready_poll_interval: float = DEFAULT_READY_POLL_INTERVAL
    drain_timeout: int = DEFAULT_DRAIN_TIMEOUT
    drain_grace_period: int = 0
    drain_delete_emptydir_data: bool = True
    kubectl: str = "kubectl"
    kube_context: Optional[str] = None
    kubeconfig: Optional[str] = None
    kubectl_max_retries: int = 3
    kubectl_retry_delay: float = 2
    kubectl_command_timeout: float = 60
    aws_region: Optional[str] = None
    aws_profile: Optional[str] = None
    ownership_tag_prefix: str = "k8s.io/cluster/"
    ownership_tag_value: str = "owned"
    deadline: Optional[float] = None


_POSITIVE_NUMBERS = ("join_poll_interval", "ready_poll_interval", "drain_timeout", "kubectl_command_timeout")
_NON_NEGATIVE_NUMBERS = ("drain_grace_period", "kubectl_max_retries", "kubectl_retry_delay")
# Passed to range() or rendered into kubectl flags, so fractions are rejected
_WHOLE_NUMBERS = ("drain_timeout", "drain_grace_period", "kubectl_max_retries")


def _validate_settings(settings: RotationSettings) -> RotationSettings:
    """
    Check numeric ranges of a settings object.

    Raises:
        ConfigurationError: If any value is out of range or of the wrong type
    """
    for name in _POSITIVE_NUMBERS + _NON_NEGATIVE_NUMBERS:
        value = getattr(settings, name)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigurationError(f"'{name}' must be a number, got {value!r}")
        if name in _WHOLE_NUMBERS and not isinstance(value, int):
            raise ConfigurationError(f"'{name}' must be a whole number, got {value!r}")
        if name in _POSITIVE_NUMBERS and value <= 0:
            raise ConfigurationError(f"'{name}' must be greater than zero, got {value}")
        if value < 0:
            raise ConfigurationError(f"'{name}' must not be negative, got {value}")

    if settings.deadline is not None and (
        isinstance(settings.deadline, bool) or not isinstance(settings.deadline, (int, float)) or settings.deadline <= 0
    ):
        raise ConfigurationError(f"'deadline' must be a positive number of seconds, got {settings.deadline!r}")

    if not isinstance(settings.drain_delete_emptydir_data, bool):
        raise ConfigurationError("'drain_delete_emptydir_data' must be true or false")

    if not settings.kubectl:
        raise ConfigurationError("'kubectl' must name an executable")

    return settings


def read_config_file(config_path: str) -> Dict[str, Any]:
    """
    Read a YAML config file into a dictionary.

    Args:
        config_path: Path to the YAML file

    Returns:
        dict: Parsed settings (empty for an empty file)

    Raises:
        ConfigurationError: If the file cannot be read, is not valid YAML, or is not a mapping
    """
    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigurationError(f"Unable to read config file {config_path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {config_path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping of settings")
    return data


def load_settings(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    printer=None,
) -> RotationSettings:
    """
    Build RotationSettings from defaults, an optional YAML file, and command-line overrides.

    Command-line overrides win over file values; overrides whose value is None are ignored.

    Args:
        config_path: Optional path to a YAML config file
        overrides: Values taken from the command line
        printer: Printer instance for logging

    Returns:
        RotationSettings: Validated settings

    Raises:
        ConfigurationError: On unknown keys or invalid values
    """
    known = {f.name for f in fields(RotationSettings)}
    values: Dict[str, Any] = {}

    if config_path:
        file_values = read_config_file(config_path)
        unknown = sorted(set(file_values) - known)
        if unknown:
            raise ConfigurationError(f"Unknown setting(s) in {config_path}: {', '.join(unknown)}")
        values.update(file_values)
        if printer:
            printer.print_info(f"Loaded {len(file_values)} setting(s) from {config_path}")

    for key, value in (overrides or {}).items():
        if key not in known:
            raise ConfigurationError(f"Unknown setting: {key}")
        if value is not None:
            values[key] = value

    return _validate_settings(replace(RotationSettings(), **values))
