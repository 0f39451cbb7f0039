"""Turn the chosen child into thumbnail pixels."""

from __future__ import annotations

import logging

from PIL import Image

from .budget import RecursionBudget
from .errors import (
    GenerationFailedError,
    KnownFailedThumbnailError,
    RecursionLimitReachedError,
    UnsupportedTypeError,
)
from .provider import DIRECTORY_MIME_TYPE, ThumbnailProvider

logger = logging.getLogger(__name__)


def resolve(
    uri: str,
    mime_type: str,
    modified_time: int,
    provider: ThumbnailProvider,
    budget: RecursionBudget,
) -> Image.Image:
    """Look up or generate the thumbnail for a file.

    A cached thumbnail is preferred; failing to load it is an error rather
    than a reason to regenerate. An entry whose header cannot be read never
    counts as cached, because ``lookup`` opens it to check the modification
    time, so such an entry is regenerated instead. Otherwise the file must be
    thumbnailable and must not have failed before.

    Generating a directory's thumbnail re-runs this whole pipeline, so it
    needs a non-exhausted recursion budget and hands the provider the budget
    minus one level. Other files are generated with the budget unchanged.
    """
    thumbnail_path = provider.lookup(uri, modified_time)
    logger.debug("Getting thumbnail for file ‘%s’ from path ‘%s’.", uri, thumbnail_path)

    if thumbnail_path is not None:
        try:
            with Image.open(thumbnail_path) as img:
                img.load()
                return img.copy()
        except (OSError, SyntaxError, ValueError) as exc:
            raise GenerationFailedError(
                f"Error loading cached thumbnail ‘{thumbnail_path}’ for file ‘{uri}’: {exc}"
            ) from exc

    if provider.has_failed(uri, modified_time):
        raise KnownFailedThumbnailError(
            f"Error generating thumbnail for file ‘{uri}’: a previous attempt failed."
        )

    if not provider.can_thumbnail(uri, mime_type, modified_time):
        logger.debug("Couldn’t generate thumbnail (because MIME type ‘%s’ is unsupported).", mime_type)
        raise UnsupportedTypeError(
            f"Error generating thumbnail for file ‘{uri}’: MIME type ‘{mime_type}’ is unsupported."
        )

    # Only directories recurse; a nested level must still generate its own file at budget 0.
    if mime_type == DIRECTORY_MIME_TYPE:
        if budget.exhausted:
            raise RecursionLimitReachedError(
                f"Error generating thumbnail for directory ‘{uri}’: recursion limit reached."
            )
        budget = budget.spent()

    logger.debug("Generating thumbnail for file ‘%s’ with recursion budget %d.", uri, budget.remaining)
    return provider.generate(uri, mime_type, budget)
