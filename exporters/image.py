"""Render DOT source to an image with the graphviz ``dot`` tool."""

import logging
import shutil
import subprocess
from pathlib import Path

from scanner.errors import RenderError


logger = logging.getLogger(__name__)

IMAGE_FORMATS = ("png", "svg", "pdf")


def render_image(dot_source: str, output: Path, fmt: str = "png", timeout: float = 60.0) -> Path:
    """
    Render DOT source to ``output``.

    Args:
        dot_source: DOT text, e.g. from to_dot.
        output: Image file to write.
        fmt: Output format understood by ``dot -T``.
        timeout: Seconds to wait for ``dot``.

    Returns:
        The written image path.

    Raises:
        RenderError: If ``dot`` is not installed, fails, or times out.
    """
    if fmt not in IMAGE_FORMATS:
        raise RenderError(f"unsupported image format '{fmt}'")

    dot = shutil.which("dot")
    if dot is None:
        raise RenderError("graphviz 'dot' not found on PATH")

    cmd = [dot, f"-T{fmt}", "-o", str(output)]
    logger.debug("Running %s", " ".join(cmd))
    try:
        result = subprocess.run(
            cmd,
            input=dot_source,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired as e:
        raise RenderError(f"'dot' timed out after {timeout}s") from e

    if result.returncode != 0:
        raise RenderError(f"'dot' exited with code {result.returncode}: {result.stderr.strip()}")

    logger.info("Image written to %s", output)
    return output
