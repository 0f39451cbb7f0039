"""Scale the chosen thumbnail and mark it with a folder overlay."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Tuple

from PIL import Image, ImageDraw

from .errors import GenerationFailedError, OverlayLoadFailedError
from .provider import ThumbnailSize

logger = logging.getLogger(__name__)

OVERLAY_SUPERSAMPLING = 4
FOLDER_TAB_COLOR = (0xC4, 0x8A, 0x10, 255)
FOLDER_BODY_COLOR = (0xF5, 0xC2, 0x11, 255)
FOLDER_OUTLINE_COLOR = (0x6B, 0x4A, 0x05, 255)


@dataclass(frozen=True)
class OverlayTier:
    icon_size: int
    offset: int
    reference_size: int


OVERLAY_TIERS: Dict[ThumbnailSize, OverlayTier] = {
    ThumbnailSize.NORMAL: OverlayTier(icon_size=32, offset=4, reference_size=128),
    ThumbnailSize.LARGE: OverlayTier(icon_size=64, offset=8, reference_size=256),
}

assert set(OVERLAY_TIERS) == set(ThumbnailSize)


def scale_down(image: Image.Image, max_size: int | None) -> Image.Image:
    """Shrink ``image`` to fit in a ``max_size`` square. Never upscales."""
    if max_size is None:
        return image

    original_width, original_height = image.size
    scale = max_size / max(original_width, original_height)
    logger.debug("Calculated scaling factor %f.", scale)

    # Only do the scaling if it will be a strictly downscaling operation.
    if scale >= 1.0:
        return image

    scaled_width = round(original_width * scale)
    scaled_height = round(original_height * scale)
    if scaled_width == 0 or scaled_height == 0:
        raise GenerationFailedError(
            f"Cannot scale a {original_width}×{original_height} thumbnail to {max_size} pixels."
        )

    logger.debug(
        "Scaling thumbnail from %d×%d to %d×%d for output size %d with scaling factor %f.",
        original_width,
        original_height,
        scaled_width,
        scaled_height,
        max_size,
        scale,
    )
    return image.resize((scaled_width, scaled_height), Image.LANCZOS)


def overlay_geometry(tier: OverlayTier, image_size: Tuple[int, int]) -> Tuple[int, int]:
    """Return the (icon size, offset) for an image of ``image_size``.

    Smaller thumbnails than the tier's reference size get a proportionally
    smaller overlay.
    """
    factor = max(image_size) / tier.reference_size
    icon_size = max(1, round(tier.icon_size * factor))
    offset = round(tier.offset * factor)
    return icon_size, offset


def draw_folder_icon(size: int) -> Image.Image:
    """Draw the built-in folder glyph as a ``size``×``size`` RGBA image."""
    canvas = size * OVERLAY_SUPERSAMPLING
    icon = Image.new("RGBA", (canvas, canvas), (0, 0, 0, 0))
    draw = ImageDraw.Draw(icon)
    outline = max(1, canvas // 32)
    radius = max(1, canvas // 12)
    draw.rounded_rectangle(
        ((canvas * 0.06, canvas * 0.16), (canvas * 0.48, canvas * 0.40)),
        radius=radius,
        fill=FOLDER_TAB_COLOR,
        outline=FOLDER_OUTLINE_COLOR,
        width=outline,
    )
    draw.rounded_rectangle(
        ((canvas * 0.04, canvas * 0.26), (canvas * 0.96, canvas * 0.86)),
        radius=radius,
        fill=FOLDER_BODY_COLOR,
        outline=FOLDER_OUTLINE_COLOR,
        width=outline,
    )
    return icon.resize((size, size), Image.BILINEAR)


def load_overlay_icon(size: int, icon_path: Path | None = None) -> Image.Image:
    """Load the overlay icon at ``size`` pixels, or draw the built-in one."""
    if icon_path is None:
        return draw_folder_icon(size)

    try:
        with Image.open(icon_path) as img:
            return img.convert("RGBA").resize((size, size), Image.BILINEAR)
    except (OSError, SyntaxError, ValueError) as exc:
        raise OverlayLoadFailedError(f"Couldn’t load overlay icon ‘{icon_path}’: {exc}") from exc


def add_overlay(
    image: Image.Image,
    thumbnail_size: ThumbnailSize,
    icon_path: Path | None = None,
) -> Image.Image:
    """Composite the folder icon onto the bottom-left corner of ``image``."""
    tier = OVERLAY_TIERS[thumbnail_size]
    icon_size, offset = overlay_geometry(tier, image.size)
    icon = load_overlay_icon(icon_size, icon_path)

    base = image.convert("RGBA")
    x = min(offset, max(0, base.width - icon_size))
    y = max(0, base.height - offset - icon_size)
    logger.debug("Adding %dpx overlay at (%d, %d).", icon_size, x, y)
    base.alpha_composite(icon, dest=(x, y))
    return base


def finalize(
    image: Image.Image,
    max_size: int | None,
    show_overlay: bool,
    overlay_icon: Path | None = None,
) -> Image.Image:
    """Scale ``image`` to the requested bound and optionally add the overlay."""
    image = scale_down(image, max_size)
    if show_overlay:
        image = add_overlay(image, ThumbnailSize.for_output_size(max_size), overlay_icon)
    return image
