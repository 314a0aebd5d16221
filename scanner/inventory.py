"""Inventory builder: which unit owns which artifacts, read from artifact.xml descriptors."""

import logging
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from .discovery import descriptor_unit, iter_descriptors
from .errors import DescriptorError
from .pool import run_all


logger = logging.getLogger(__name__)

Inventory = Dict[str, List[str]]


@dataclass(frozen=True)
class Artifact:
    """A single ``<artifact>`` entry of a descriptor."""

    name: str
    type: str
    item_file: Optional[str] = None
    item_path: Optional[str] = None


def parse_descriptor(path: Path) -> List[Artifact]:
    """
    Parse an ``artifact.xml`` descriptor.

    The descriptor lists ``<artifact name=".." type="..">`` elements, each with
    an optional ``<item><file/><path/></item>`` child.

    Args:
        path: Descriptor file.

    Returns:
        Artifacts in document order.

    Raises:
        DescriptorError: If the file cannot be read or is not well-formed XML.
    """
    try:
        content = path.read_bytes()
    except OSError as e:
        raise DescriptorError(path, f"cannot read descriptor: {e}") from e

    try:
        root = ET.fromstring(content)
    except ET.ParseError as e:
        raise DescriptorError(path, f"malformed descriptor: {e}") from e

    artifacts: List[Artifact] = []
    for element in root.findall("artifact"):
        item = element.find("item")
        artifacts.append(
            Artifact(
                name=element.get("name", ""),
                type=element.get("type", ""),
                item_file=item.findtext("file") if item is not None else None,
                item_path=item.findtext("path") if item is not None else None,
            )
        )
    return artifacts


def build_inventory(
    root: Path,
    skip_dirs: Optional[Set[str]] = None,
    layout: str = "src",
    workers: int = 4,
) -> Inventory:
    """
    Scan a tree and collect the artifact names owned by every unit.

    Descriptors are parsed concurrently. Lists from several descriptors of the
    same unit are concatenated in walk order; duplicates are kept.
    Descriptors that cannot be attributed to a unit are skipped.

    Args:
        root: Root directory to scan.
        skip_dirs: Directory names to prune.
        layout: Descriptor ownership rule, see descriptor_unit.
        workers: Maximum number of descriptors parsed at once.

    Returns:
        Mapping of unit name to artifact names.

    Raises:
        DescriptorError: If any descriptor is unreadable or malformed.
    """
    root = root.resolve()
    owned: List[Tuple[str, Path]] = []
    for path in iter_descriptors(root, skip_dirs):
        unit = descriptor_unit(path, layout, root)
        if unit is None:
            logger.debug("Skipping descriptor outside any unit: %s", path)
            continue
        owned.append((unit, path))

    parsed = run_all(lambda entry: parse_descriptor(entry[1]), owned, workers, "inventory")

    inventory: Inventory = {}
    for (unit, _), artifacts in zip(owned, parsed):
        inventory.setdefault(unit, []).extend(a.name for a in artifacts if a.name)

    logger.info(
        "Read %d descriptors: %d units, %d artifacts",
        len(owned),
        len(inventory),
        sum(len(names) for names in inventory.values()),
    )
    return inventory
