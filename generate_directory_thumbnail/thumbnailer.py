"""Create a thumbnail for a directory from its most interesting child.

If thumbnailing the most interesting child fails, there is no fallback to the
next best one: the directory simply ends up with no thumbnail.
"""

from __future__ import annotations

import logging
from pathlib import Path

from PIL import Image

from .budget import RecursionBudget
from .compositor import finalize
from .errors import EmptyDirectoryError, InvalidArgumentsError, SaveFailedError
from .provider import ThumbnailProvider
from .resolver import resolve
from .scanner import pick_representative

logger = logging.getLogger(__name__)


def create_thumbnail_for_directory(
    input_directory: Path,
    provider: ThumbnailProvider,
    budget: RecursionBudget,
    show_progress: bool = False,
) -> Image.Image:
    """Return the thumbnail of the most interesting child of ``input_directory``.

    Raises:
        EmptyDirectoryError: the directory has no eligible children.
        ThumbnailerError: scanning or resolving the chosen child failed.
    """
    candidate = pick_representative(input_directory, provider, show_progress=show_progress)
    if candidate is None:
        raise EmptyDirectoryError()

    entry = candidate.entry
    return resolve(candidate.uri, entry.content_type, entry.modified_time, provider, budget)


def save_thumbnail(image: Image.Image, output_file: Path) -> None:
    """Save ``image`` as PNG, overwriting any existing file."""
    logger.debug("Saving thumbnail to file ‘%s’.", output_file)
    try:
        image.save(output_file, "PNG")
    except (OSError, ValueError) as exc:
        raise SaveFailedError(str(exc)) from exc


def generate_directory_thumbnail(
    input_directory: Path,
    output_file: Path,
    provider: ThumbnailProvider,
    budget: RecursionBudget,
    max_size: int | None = None,
    show_overlay: bool = False,
    overlay_icon: Path | None = None,
    show_progress: bool = False,
) -> Image.Image:
    """Run the whole pipeline and write the PNG to ``output_file``.

    Raises:
        InvalidArgumentsError: ``max_size`` is given but not a positive number of pixels.
    """
    if max_size is not None and max_size <= 0:
        raise InvalidArgumentsError(f"Invalid size {max_size}: must be a positive number of pixels.")

    thumbnail = create_thumbnail_for_directory(
        input_directory,
        provider,
        budget,
        show_progress=show_progress,
    )
    thumbnail = finalize(thumbnail, max_size, show_overlay, overlay_icon)
    save_thumbnail(thumbnail, output_file)
    return thumbnail
