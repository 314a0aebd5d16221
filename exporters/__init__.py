"""Exporters for converting dependency graphs to various output formats."""

from .text_exporter import to_text
from .dot_exporter import to_dot
from .mermaid_exporter import to_mermaid
from .json_exporter import to_json, to_json_sections
from .image import render_image

__all__ = ["to_text", "to_dot", "to_mermaid", "to_json", "to_json_sections", "render_image"]
