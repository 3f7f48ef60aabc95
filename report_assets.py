#!/usr/bin/env python3
"""
Best-effort asset acquisition for the PDF report.

Two assets are optional: a TrueType font covering Cyrillic text and a
bitmap of the passing-score chart. Loading either one returns an outcome
instead of raising: ``Loaded`` with the asset, or ``Degraded`` with the
reason. The compositor decides what to do with a degraded asset.

Usage:
    outcome = load_font("fonts/Roboto-Regular.ttf", "Roboto")
    if isinstance(outcome, Loaded):
        document.use_font(outcome.value.name, outcome.value.bold_name)
"""

import asyncio
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Any, Optional, Union

import requests
from PIL import Image
from reportlab.graphics.shapes import Drawing
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.pdfmetrics import registerFontFamily
from reportlab.pdfbase.ttfonts import TTFont

from logging_config import get_logger

logger = get_logger(__name__)

# Drawings are rendered at twice their nominal size for a sharp print
CAPTURE_SCALE = 2
DEFAULT_FONT_TIMEOUT = 10


@dataclass(frozen=True)
class Loaded:
    """An asset that was acquired successfully."""
    value: Any


@dataclass(frozen=True)
class Degraded:
    """An asset that could not be acquired, and why."""
    reason: str


AssetOutcome = Union[Loaded, Degraded]


@dataclass(frozen=True)
class FontAsset:
    """A registered font family: regular and bold face names."""
    name: str
    bold_name: str
    source: str


@dataclass(frozen=True)
class ChartBitmap:
    """A rasterized chart ready to be placed on the page."""
    png: bytes
    width_px: int
    height_px: int

    def height_for_width(self, width: float) -> float:
        """Height that keeps the aspect ratio at the given print width."""
        return self.height_px * width / self.width_px


def read_font_bytes(source: str, timeout: Optional[float] = None) -> bytes:
    """Read a font from a local path or an http(s) URL."""
    if source.startswith(("http://", "https://")):
        response = requests.get(source, timeout=timeout or DEFAULT_FONT_TIMEOUT)
        response.raise_for_status()
        return response.content
    return Path(source).read_bytes()


def register_font(name: str, data: bytes, source: str = "") -> FontAsset:
    """
    Register ``data`` under ``name`` (regular) and ``name-Bold`` (bold).

    The resource has a single weight, so both faces share the same glyphs.
    """
    bold_name = f"{name}-Bold"
    pdfmetrics.registerFont(TTFont(name, BytesIO(data)))
    pdfmetrics.registerFont(TTFont(bold_name, BytesIO(data)))
    registerFontFamily(name, normal=name, bold=bold_name, italic=name, boldItalic=bold_name)
    return FontAsset(name=name, bold_name=bold_name, source=source)


def load_font(source: str, name: str, timeout: Optional[float] = None) -> AssetOutcome:
    """
    Fetch and register a font. Never raises.

    Args:
        source: Local path or URL of a .ttf file
        name: Logical font name to register it under
        timeout: Network timeout in seconds for URL sources

    Returns:
        Loaded(FontAsset) on success, Degraded(reason) otherwise
    """
    try:
        data = read_font_bytes(source, timeout)
        asset = register_font(name, data, source)
    except Exception as e:
        reason = f"font '{name}' unavailable from {source}: {e}"
        logger.warning(f"{reason}; Cyrillic text may not render")
        return Degraded(reason)

    logger.info(f"Registered font {name} from {source}")
    return Loaded(asset)


def _to_image(source: Any) -> Image.Image:
    """Turn any supported chart source into a Pillow image."""
    if hasattr(source, "capture"):
        source = source.capture()

    if isinstance(source, Drawing):
        from reportlab.graphics import renderPM
        png = renderPM.drawToString(source, fmt="PNG", dpi=72 * CAPTURE_SCALE)
        return Image.open(BytesIO(png))
    if isinstance(source, Image.Image):
        return source
    if isinstance(source, (bytes, bytearray)):
        return Image.open(BytesIO(bytes(source)))
    if isinstance(source, (str, Path)):
        return Image.open(source)

    raise TypeError(f"Unsupported chart source: {type(source).__name__}")


def rasterize_chart(source: Any) -> AssetOutcome:
    """
    Rasterize a chart source to PNG. Never raises.

    Accepted sources: a reportlab Drawing, a Pillow image, encoded image
    bytes, an image file path, or an object whose ``capture()`` returns one
    of those.

    Returns:
        Loaded(ChartBitmap) on success, Degraded(reason) otherwise
    """
    try:
        image = _to_image(source)
        image.load()
        width, height = image.size
        if width <= 0 or height <= 0:
            raise ValueError(f"empty chart image ({width}x{height})")
        if image.mode not in ("RGB", "RGBA", "L", "P"):
            image = image.convert("RGB")
        buffer = BytesIO()
        image.save(buffer, format="PNG")
    except Exception as e:
        reason = f"chart capture failed: {e}"
        logger.error(reason)
        return Degraded(reason)

    return Loaded(ChartBitmap(png=buffer.getvalue(), width_px=width, height_px=height))


async def load_font_async(source: str, name: str, timeout: Optional[float] = None) -> AssetOutcome:
    """``load_font`` in a worker thread."""
    return await asyncio.to_thread(load_font, source, name, timeout)


async def rasterize_chart_async(source: Any) -> AssetOutcome:
    """``rasterize_chart`` in a worker thread."""
    return await asyncio.to_thread(rasterize_chart, source)
