#!/usr/bin/env python3
"""
Car Dependency Mapper CLI

Scans a tree of car projects for artifacts referenced across units and
prints the unit dependency graph in various formats.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from depgraph.filters import UnitFilter
from scanner.builder import run
from scanner.config import LOG_LEVELS, STRATEGIES, load_config
from scanner.discovery import DESCRIPTOR_LAYOUTS
from scanner.errors import CarDepsError
from exporters import to_dot, to_json, to_json_sections, to_mermaid, to_text, render_image
from exporters.image import IMAGE_FORMATS


logger = logging.getLogger("cardeps")

OVERLAY_SECTION = "both"

# Section header line per format when several graphs go to stdout
SECTION_HEADERS = {
    "text": "# {}",
    "dot": "// {}",
    "mermaid": "%% {}",
}


def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="cardeps",
        description="Find dependencies between car units by scanning their configuration artifacts.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  cardeps .                                # Structural scan, text report
  cardeps ./project -f dot -o graph.dot    # DOT output to file
  cardeps . --strategy both -f dot         # Compare regex and structural scans
  cardeps . --cars CarA,CarB               # Only show CarA and CarB
  cardeps . --ignore-cars 'Test$'          # Hide units ending in Test
  cardeps . --image graph.png              # Also render an image (needs graphviz)
        """,
    )

    # Positional arguments
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Project root directory (default: current directory)",
    )

    # Output options
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output file (default: stdout)",
    )

    parser.add_argument(
        "-f", "--format",
        choices=["text", "dot", "mermaid", "json"],
        default="text",
        help="Output format (default: text)",
    )

    parser.add_argument(
        "--orientation",
        choices=["LR", "TD", "TB", "RL", "BT"],
        default="LR",
        help="Mermaid flowchart orientation (default: LR)",
    )

    parser.add_argument(
        "--image",
        type=str,
        default=None,
        help="Also render the graph to this image file with graphviz",
    )

    parser.add_argument(
        "--image-format",
        choices=IMAGE_FORMATS,
        default="png",
        help="Image format for --image (default: png)",
    )

    # Filtering options
    parser.add_argument(
        "--cars",
        type=str,
        default=None,
        help="Comma separated units to show; overrides --ignore-cars",
    )

    parser.add_argument(
        "--ignore-cars",
        type=str,
        default=None,
        help="Regular expression of units to hide",
    )

    # Scanning options
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML configuration file (default: cardeps.yaml in the root, if present)",
    )

    parser.add_argument(
        "--strategy",
        choices=STRATEGIES,
        default=None,
        help="Reference extraction: regex, structural, or both (each graph plus their reconciliation)",
    )

    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of files parsed concurrently",
    )

    parser.add_argument(
        "--descriptor-layout",
        choices=DESCRIPTOR_LAYOUTS,
        default=None,
        help="How artifact.xml descriptors map to units",
    )

    parser.add_argument(
        "--get-property-names",
        action="store_true",
        default=None,
        help="Resolve the argument of get-property('...') calls as an artifact name",
    )

    parser.add_argument(
        "--strict-collisions",
        action="store_true",
        default=None,
        help="Fail when two units declare the same artifact name",
    )

    # Logging
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        default=None,
        help="Log level (default: WARNING)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Shortcut for --log-level INFO",
    )

    return parser.parse_args(args)


def _split_units(value: Optional[str]) -> Optional[List[str]]:
    if value is None:
        return None
    return [unit.strip() for unit in value.split(",") if unit.strip()]


def main(args=None):
    """Main entry point."""
    parsed = parse_args(args)

    root = Path(parsed.root).resolve()
    if not root.is_dir():
        print(f"Error: '{parsed.root}' is not a directory", file=sys.stderr)
        return 1

    try:
        config = load_config(Path(parsed.config) if parsed.config else None, root)
        config = config.merged(
            strategy=parsed.strategy,
            workers=parsed.workers,
            units=_split_units(parsed.cars),
            exclude_units=parsed.ignore_cars,
            descriptor_layout=parsed.descriptor_layout,
            get_property_names=parsed.get_property_names,
            strict_collisions=parsed.strict_collisions,
            log_level=parsed.log_level or ("INFO" if parsed.verbose else None),
        )
    except CarDepsError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        result = run(root, config)
    except (CarDepsError, OSError) as e:
        logger.debug("Scan aborted", exc_info=True)
        print(f"Error scanning project: {e}", file=sys.stderr)
        return 1

    unit_filter = UnitFilter(config.units, config.exclude_units)

    # With both strategies, each strategy's graph is emitted next to the overlay
    if result.overlay is not None:
        sections = dict(result.graphs)
        sections[OVERLAY_SECTION] = result.overlay
    else:
        sections = {"": result.graph}

    if parsed.image:
        image = Path(parsed.image)
        try:
            for label, graph in sections.items():
                render_image(to_dot(graph, unit_filter), _section_path(image, label), parsed.image_format)
        except CarDepsError as e:
            print(f"Error rendering image: {e}", file=sys.stderr)
            return 1

    # Write output
    if parsed.output:
        output_path = Path(parsed.output)
        for label, graph in sections.items():
            path = _section_path(output_path, label)
            try:
                path.write_text(_export(graph, parsed, unit_filter), encoding="utf-8")
            except OSError as e:
                print(f"Error writing output: {e}", file=sys.stderr)
                return 1
            print(f"Output written to: {path}", file=sys.stderr)
    elif len(sections) == 1:
        print(_export(result.graph, parsed, unit_filter))
    elif parsed.format == "json":
        print(to_json_sections(sections, unit_filter))
    else:
        header = SECTION_HEADERS[parsed.format]
        for label, graph in sections.items():
            print(header.format(label))
            print(_export(graph, parsed, unit_filter))

    return 0


def _export(graph, parsed, unit_filter) -> str:
    if parsed.format == "dot":
        return to_dot(graph, unit_filter)
    elif parsed.format == "mermaid":
        return to_mermaid(graph, unit_filter, orientation=parsed.orientation)
    elif parsed.format == "json":
        return to_json(graph, unit_filter)
    else:  # text (default)
        return to_text(graph, unit_filter)


def _section_path(path: Path, label: str) -> Path:
    """File of one section: ``graph.dot`` becomes ``regex-graph.dot``; the overlay keeps the name."""
    if not label or label == OVERLAY_SECTION:
        return path
    return path.with_name(f"{label}-{path.name}")


if __name__ == "__main__":
    sys.exit(main())
