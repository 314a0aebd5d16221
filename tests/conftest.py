"""Shared fixtures: temporary trees laid out like car projects."""

import tempfile
from pathlib import Path
from typing import Iterable

import pytest


def artifact_xml(names: Iterable[str], artifact_type: str = "synapse/sequence") -> str:
    """Build the text of an artifact.xml descriptor declaring ``names``."""
    entries = "\n".join(
        f'    <artifact name="{name}" type="{artifact_type}" version="1.0.0">\n'
        f"        <item><file>{name}.xml</file><path>src/main/synapse-config</path></item>\n"
        f"    </artifact>"
        for name in names
    )
    return f'<?xml version="1.0" encoding="UTF-8"?>\n<artifacts>\n{entries}\n</artifacts>\n'


class CarTree:
    """Writes car projects below a root: ``<root>/<car>/<car>-config/src/...``."""

    def __init__(self, root: Path):
        self.root = root

    def module_dir(self, car: str) -> Path:
        return self.root / car / f"{car}-config"

    def descriptor(self, car: str, names: Iterable[str], sub: str = "src") -> Path:
        path = self.module_dir(car) / sub / "artifact.xml"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(artifact_xml(names), encoding="utf-8")
        return path

    def config_file(self, car: str, name: str, content: str, sub: str = "src/main/synapse-config") -> Path:
        path = self.module_dir(car) / sub / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path


@pytest.fixture
def tree():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield CarTree(Path(tmpdir).resolve())


@pytest.fixture
def nested_tree():
    """A tree whose root lies below a directory named ``src``."""
    with tempfile.TemporaryDirectory() as tmpdir:
        root = Path(tmpdir).resolve() / "src" / "ws"
        root.mkdir(parents=True)
        yield CarTree(root)
