"""Unit allow-list used when presenting a graph."""

import re
from typing import Iterable, Optional


class UnitFilter:
    """
    Decides which units are shown.

    With an explicit unit list only those units are allowed and the exclusion
    pattern is ignored. Otherwise every unit is allowed except the ones the
    exclusion pattern matches (searched anywhere in the name).
    """

    def __init__(self, units: Optional[Iterable[str]] = None, exclude_pattern: Optional[str] = None):
        self._units = {u for u in (units or ()) if u}
        self._exclude = re.compile(exclude_pattern) if exclude_pattern else None

    def allows(self, unit: str) -> bool:
        if self._units:
            return unit in self._units
        if self._exclude is not None:
            return self._exclude.search(unit) is None
        return True

    def allows_edge(self, source: str, target: str) -> bool:
        return self.allows(source) and self.allows(target)

    def __call__(self, unit: str) -> bool:
        return self.allows(unit)

    def __repr__(self) -> str:
        pattern = self._exclude.pattern if self._exclude else None
        return f"UnitFilter(units={sorted(self._units)}, exclude={pattern!r})"


ALLOW_ALL = UnitFilter()
