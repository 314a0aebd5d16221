"""Run configuration, loaded from an optional YAML file and CLI overrides."""

import logging
import os
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import yaml

from .discovery import (
    DEFAULT_SKIP_DIRS,
    DEFAULT_SKIP_FILES,
    DESCRIPTOR_LAYOUTS,
    XML_EXTENSION,
)
from .errors import ConfigError


logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "cardeps.yaml"
STRATEGIES = ("regex", "structural", "both")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def default_workers() -> int:
    """Worker pool size used when none is configured."""
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass(frozen=True)
class ScanConfig:
    """Parameters of a single dependency run."""

    skip_dirs: Set[str] = field(default_factory=lambda: set(DEFAULT_SKIP_DIRS))
    skip_files: Set[str] = field(default_factory=lambda: set(DEFAULT_SKIP_FILES))
    extension: str = XML_EXTENSION
    workers: int = field(default_factory=default_workers)
    strategy: str = "structural"
    units: List[str] = field(default_factory=list)
    exclude_units: Optional[str] = None
    descriptor_layout: str = "src"
    get_property_names: bool = False
    strict_collisions: bool = False
    log_level: str = "WARNING"

    def __post_init__(self):
        if self.strategy not in STRATEGIES:
            raise ConfigError(
                f"unknown strategy '{self.strategy}' (expected one of {', '.join(STRATEGIES)})"
            )
        if self.descriptor_layout not in DESCRIPTOR_LAYOUTS:
            raise ConfigError(
                f"unknown descriptor_layout '{self.descriptor_layout}' "
                f"(expected one of {', '.join(DESCRIPTOR_LAYOUTS)})"
            )
        if self.workers < 1:
            raise ConfigError(f"workers must be at least 1, got {self.workers}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ConfigError(f"unknown log_level '{self.log_level}'")
        if self.exclude_units:
            try:
                re.compile(self.exclude_units)
            except re.error as e:
                raise ConfigError(f"invalid exclude_units pattern: {e}") from e

    def merged(self, **overrides: Any) -> "ScanConfig":
        """Return a copy with every override that is not None applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes)


def _coerce(key: str, value: Any) -> Any:
    """Convert a raw YAML value to the type ScanConfig expects for ``key``."""
    if key in ("skip_dirs", "skip_files"):
        if not isinstance(value, list):
            raise ConfigError(f"'{key}' must be a list")
        return {str(item) for item in value}
    if key == "units":
        if isinstance(value, str):
            return [unit.strip() for unit in value.split(",") if unit.strip()]
        if not isinstance(value, list):
            raise ConfigError("'units' must be a list or comma separated string")
        return [str(unit) for unit in value]
    if key == "workers":
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigError("'workers' must be an integer")
        return value
    if key in ("get_property_names", "strict_collisions"):
        if not isinstance(value, bool):
            raise ConfigError(f"'{key}' must be true or false")
        return value
    return None if value is None else str(value)


def load_config(path: Optional[Path] = None, root: Optional[Path] = None) -> ScanConfig:
    """
    Load a ScanConfig from YAML.

    Args:
        path: Explicit configuration file. Must exist if given.
        root: Scan root; ``cardeps.yaml`` there is used when ``path`` is None.

    Returns:
        The loaded configuration, or defaults when no file applies.

    Raises:
        ConfigError: If the file is unreadable, not valid YAML, or holds
                     unknown keys or invalid values.
    """
    if path is None:
        if root is None:
            return ScanConfig()
        path = root / CONFIG_FILE_NAME
        if not path.is_file():
            return ScanConfig()

    try:
        content = path.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"cannot read configuration: {e}", path) from e

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid YAML: {e}", path) from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("configuration must be a mapping", path)

    known = {f.name for f in fields(ScanConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown keys: {', '.join(unknown)}", path)

    values: Dict[str, Any] = {}
    for key, value in data.items():
        try:
            values[key] = _coerce(key, value)
        except ConfigError as e:
            raise ConfigError(str(e), path) from e

    logger.debug("Loaded configuration from %s", path)
    try:
        return ScanConfig(**values)
    except ConfigError as e:
        raise ConfigError(str(e), path) from e
