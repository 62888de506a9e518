"""Image sizing, embedding, and fallbacks for Word generation.

Handles loading images from the directive's filename or base64 data,
auto-scaling to configured max dimensions, and placeholder generation
when images are unavailable.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Optional

from docx.document import Document
from docx.image.exceptions import UnrecognizedImageError
from docx.shared import Inches

from aozora_reader.config import ImageConfig
from aozora_reader.exceptions import ImageError
from aozora_reader.ir.schema import Image

logger = logging.getLogger(__name__)

# Aozora image directives give sizes in screen pixels
PIXELS_PER_INCH = 96


def add_image(
    doc: Document,
    element: Image,
    config: ImageConfig,
    base_dir: Optional[Path] = None,
):
    """Add the picture an ``Image`` element points at in a paragraph of its own.

    Tries ``filename`` first (relative to base_dir), then ``base64``.
    Falls back to a placeholder paragraph if neither works.

    Args:
        doc: The python-docx Document.
        element: The parsed image element.
        config: Image configuration (max dimensions, placeholder text).
        base_dir: Base directory for resolving relative image paths.

    Returns:
        The paragraph holding the picture or the placeholder text.
    """
    paragraph = doc.add_paragraph()
    try:
        image_stream = load_image(element, base_dir)
        width, height = _compute_dimensions(image_stream, element, config)
        _embed(paragraph, image_stream, width, height)
    except ImageError as exc:
        logger.warning("Image %r not embedded: %s", element.filename or element.description, exc)
        _add_placeholder(paragraph, element, config)
    return paragraph


def load_image(element: Image, base_dir: Optional[Path]) -> io.BytesIO:
    """Load image bytes from the filename or base64 data.

    Raises:
        ImageError: If neither source yields image bytes.
    """
    if element.filename:
        path = Path(element.filename)
        if base_dir and not path.is_absolute():
            path = base_dir / path

        if path.exists():
            try:
                return io.BytesIO(path.read_bytes())
            except OSError as exc:
                logger.warning("Failed to read image %s: %s", path, exc)

    if element.base64:
        try:
            return io.BytesIO(base64.b64decode(element.base64, validate=True))
        except (binascii.Error, ValueError) as exc:
            raise ImageError(f"invalid base64 data: {exc}") from exc

    raise ImageError(f"no readable source (filename={element.filename!r})")


def _compute_dimensions(
    image_stream: io.BytesIO,
    element: Image,
    config: ImageConfig,
) -> tuple[Inches, Inches]:
    """Return the picture size in inches, scaled down to the configured box.

    The directive's ``横N×縦N`` pixel size wins; otherwise the image's own
    size and DPI are read with Pillow.
    """
    if element.width and element.height:
        size = (element.width / PIXELS_PER_INCH, element.height / PIXELS_PER_INCH)
    else:
        size = _native_size(image_stream)

    width_in, height_in = _fit_within(size, config.max_width_inches, config.max_height_inches)
    return Inches(width_in), Inches(height_in)


def _native_size(image_stream: io.BytesIO) -> tuple[float, float]:
    from PIL import Image as PILImage
    from PIL import UnidentifiedImageError

    image_stream.seek(0)
    try:
        with PILImage.open(image_stream) as img:
            dpi = img.info.get("dpi", (PIXELS_PER_INCH, PIXELS_PER_INCH))
            pixels = img.size
    except (UnidentifiedImageError, OSError) as exc:
        raise ImageError(f"unreadable image data: {exc}") from exc

    # Some files report a DPI of 0 or 1; treat anything below 72 as 72
    dpi_x, dpi_y = (max(float(d), 72.0) for d in dpi)
    return pixels[0] / dpi_x, pixels[1] / dpi_y


def _fit_within(size: tuple[float, float], max_width: float, max_height: float) -> tuple[float, float]:
    """Shrink ``size`` uniformly until it fits; never enlarge."""
    width, height = size
    scale = min(1.0, max_width / width if width else 1.0, max_height / height if height else 1.0)
    return width * scale, height * scale


def _embed(paragraph, image_stream: io.BytesIO, width, height) -> None:
    image_stream.seek(0)
    try:
        paragraph.add_run().add_picture(image_stream, width=width, height=height)
    except UnrecognizedImageError as exc:
        raise ImageError(f"unsupported image format: {exc}") from exc


def _add_placeholder(paragraph, element: Image, config: ImageConfig) -> None:
    """Write placeholder text when an image is unavailable."""
    run = paragraph.add_run(config.placeholder_text.format(description=element.description))
    run.italic = True
