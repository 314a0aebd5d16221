"""Reverse index and raw-text reference matcher built from an inventory."""

import logging
import re
from typing import Dict, List, Mapping, Optional, Sequence

from .errors import ArtifactCollisionError


logger = logging.getLogger(__name__)

# Matches nothing; used when the inventory holds no artifact names.
_NEVER = re.compile(r"(?!)")


def build_reverse_index(
    inventory: Mapping[str, Sequence[str]],
    strict: bool = False,
) -> Dict[str, str]:
    """
    Invert an inventory into artifact name -> owning unit.

    Units are visited in sorted order, so when two units declare the same
    artifact the alphabetically last unit owns it. Every collision is logged.

    Args:
        inventory: Unit name to artifact names.
        strict: Raise instead of overriding on a collision.

    Raises:
        ArtifactCollisionError: On the first collision when ``strict`` is set.
    """
    index: Dict[str, str] = {}
    for unit in sorted(inventory):
        for artifact in inventory[unit]:
            if not artifact:
                continue
            owner = index.get(artifact)
            if owner is not None and owner != unit:
                if strict:
                    raise ArtifactCollisionError(artifact, owner, unit)
                logger.warning(
                    "Artifact '%s' declared by both '%s' and '%s'; attributing it to '%s'",
                    artifact, owner, unit, unit,
                )
            index[artifact] = unit
    return index


def build_pattern(artifacts: Sequence[str]) -> re.Pattern:
    """
    Compile an alternation of every artifact name, escaped literally.

    Longer names come first so a name that is a prefix of another one does
    not hide it.
    """
    names = sorted({name for name in artifacts if name}, key=lambda n: (-len(n), n))
    if not names:
        return _NEVER
    return re.compile("|".join(re.escape(name) for name in names))


class ReferenceMatcher:
    """
    Resolves artifact names to units and finds artifact names in raw text.

    Built once per run from the finished inventory and read-only afterwards,
    so it is shared by all scan workers without locking.
    """

    def __init__(self, reverse_index: Dict[str, str], pattern: re.Pattern):
        self._reverse_index = reverse_index
        self._pattern = pattern

    @classmethod
    def from_inventory(
        cls,
        inventory: Mapping[str, Sequence[str]],
        strict: bool = False,
    ) -> "ReferenceMatcher":
        """Build the reverse index and the alternation pattern in one pass."""
        reverse_index = build_reverse_index(inventory, strict=strict)
        matcher = cls(reverse_index, build_pattern(list(reverse_index)))
        logger.info("Built reference matcher for %d artifacts", len(reverse_index))
        return matcher

    @property
    def reverse_index(self) -> Dict[str, str]:
        """Return a copy of the artifact -> unit mapping."""
        return dict(self._reverse_index)

    def resolve(self, artifact: str) -> Optional[str]:
        """Return the unit owning ``artifact``, or None for unknown names."""
        return self._reverse_index.get(artifact)

    def find_references(self, text: str) -> List[str]:
        """Return every non-overlapping artifact name occurring in ``text``."""
        return self._pattern.findall(text)

    def __len__(self) -> int:
        return len(self._reverse_index)

    def __repr__(self) -> str:
        return f"ReferenceMatcher(artifacts={len(self._reverse_index)})"
