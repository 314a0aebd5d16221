"""File discovery utilities for scanning car project trees."""

from pathlib import Path
from typing import Iterator, Optional, Set, Tuple


DESCRIPTOR_NAME = "artifact.xml"
XML_EXTENSION = ".xml"
SOURCE_DIR_NAME = "src"

DEFAULT_SKIP_DIRS = {"target"}
DEFAULT_SKIP_FILES = {"pom.xml", DESCRIPTOR_NAME}

DESCRIPTOR_LAYOUTS = ("src", "module")


def _walk(current: Path, skip_dirs: Set[str]) -> Iterator[Path]:
    """Yield every file below ``current`` in sorted order, pruning ``skip_dirs``."""
    for entry in sorted(current.iterdir()):
        if entry.is_dir():
            if entry.name in skip_dirs:
                continue
            yield from _walk(entry, skip_dirs)
        elif entry.is_file():
            yield entry


def iter_descriptors(
    root: Path,
    skip_dirs: Optional[Set[str]] = None,
) -> Iterator[Path]:
    """
    Iterate over every ``artifact.xml`` descriptor in a tree.

    Args:
        root: Root directory to scan.
        skip_dirs: Directory names that are never descended.
                   If None, uses DEFAULT_SKIP_DIRS.

    Yields:
        Path objects for descriptor files.
    """
    if skip_dirs is None:
        skip_dirs = DEFAULT_SKIP_DIRS

    for entry in _walk(root.resolve(), skip_dirs):
        if entry.name == DESCRIPTOR_NAME:
            yield entry


def iter_files(
    root: Path,
    skip_dirs: Optional[Set[str]] = None,
    skip_files: Optional[Set[str]] = None,
    extension: str = XML_EXTENSION,
) -> Iterator[Path]:
    """
    Iterate over the configuration files eligible for the dependency scan.

    Args:
        root: Root directory to scan.
        skip_dirs: Directory names to prune. If None, uses DEFAULT_SKIP_DIRS.
        skip_files: File names to exclude. If None, uses DEFAULT_SKIP_FILES.
        extension: Only files with this suffix are yielded.

    Yields:
        Path objects for matching files.

    Raises:
        OSError: If a directory cannot be listed.
    """
    if skip_dirs is None:
        skip_dirs = DEFAULT_SKIP_DIRS
    if skip_files is None:
        skip_files = DEFAULT_SKIP_FILES

    for entry in _walk(root.resolve(), skip_dirs):
        if entry.name in skip_files:
            continue
        if entry.suffix != extension:
            continue
        yield entry


def _tree_parts(path: Path, root: Optional[Path]) -> Tuple[str, ...]:
    """Path segments below ``root``, or below the filesystem anchor without one."""
    if root is not None:
        return path.relative_to(root).parts
    if path.anchor:
        return path.parts[1:]
    return path.parts


def unit_from_path(path: Path, root: Optional[Path] = None) -> Optional[str]:
    """
    Derive the owning unit of a file from its location.

    The unit is the directory two levels above the deepest ``src`` segment
    of the path, e.g. ``CarA/CarA-module/src/main/.../Proxy.xml`` belongs
    to ``CarA``. Only segments below ``root`` are considered, so where the
    tree sits on disk never changes the answer.

    Args:
        path: Path of the file.
        root: Scan root ``path`` lies under. If None, every segment below
              the filesystem anchor is considered.

    Returns:
        The unit name, or None if the path has no usable ``src`` segment.
    """
    parts = _tree_parts(path, root)
    for i in range(len(parts) - 2, 1, -1):
        if parts[i] == SOURCE_DIR_NAME:
            return parts[i - 2]
    return None


def descriptor_unit(path: Path, layout: str = "src", root: Optional[Path] = None) -> Optional[str]:
    """
    Derive the owning unit of an ``artifact.xml`` descriptor.

    Args:
        path: Path of the descriptor.
        layout: ``"src"`` applies the same rule as unit_from_path;
                ``"module"`` takes the grandparent directory, for trees laid
                out as ``<unit>/<module>/artifact.xml``.
        root: Scan root, see unit_from_path.

    Returns:
        The unit name, or None if the descriptor is not attributable.
    """
    if layout == "module":
        parts = _tree_parts(path, root)
        if len(parts) >= 3:
            return parts[-3]
        return None
    return unit_from_path(path, root)


def source_name(path: Path) -> str:
    """Name a scanned file by its base name without extension."""
    return path.stem
