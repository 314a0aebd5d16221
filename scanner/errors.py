"""Exceptions raised while scanning a tree of car projects."""

from pathlib import Path
from typing import Optional


class CarDepsError(Exception):
    """Base class for all errors that abort a dependency run."""


class DescriptorError(CarDepsError):
    """An artifact.xml descriptor could not be read or parsed."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class ScanError(CarDepsError):
    """A configuration file could not be read or parsed during the dependency scan."""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}")


class ArtifactCollisionError(CarDepsError):
    """Two units declare the same artifact name (strict mode only)."""

    def __init__(self, artifact: str, first_unit: str, second_unit: str):
        self.artifact = artifact
        self.units = (first_unit, second_unit)
        super().__init__(
            f"artifact '{artifact}' is declared by both '{first_unit}' and '{second_unit}'"
        )


class ConfigError(CarDepsError):
    """Invalid configuration file or option value."""

    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class RenderError(CarDepsError):
    """Rendering a graph to an image failed."""
