"""Interestingness scoring for directory children.

The score says how good a child is likely to be as a thumbnail representing
the whole directory. Feel free to tune the weights below; when adding or
changing a rule, recompute ``MAX_INTERESTINGNESS``.
"""

from __future__ import annotations

from typing import Dict

from .models import ChildEntry, FileKind
from .provider import ThumbnailProvider

MIN_INTERESTINGNESS = 1
SCORE_CEILING = 2**32 - 1

# Subdirectories rank below special files: picking one means recursing.
KIND_WEIGHTS: Dict[FileKind, int] = {
    FileKind.REGULAR: 20,
    FileKind.SYMLINK: 20,
    FileKind.SHORTCUT: 20,
    FileKind.SPECIAL: 10,
    FileKind.MOUNTABLE: 10,
    FileKind.DIRECTORY: 5,
    FileKind.UNKNOWN: 0,
}
HIDDEN_OR_BACKUP_PENALTY = 5
# Applied once whether the type is unsupported or a failure is on record.
UNTHUMBNAILABLE_PENALTY = 20
IMAGE_BONUS = 5
IMAGE_MIME_PREFIX = "image/"

MAX_INTERESTINGNESS = 26

assert set(KIND_WEIGHTS) == set(FileKind)
assert MAX_INTERESTINGNESS == MIN_INTERESTINGNESS + max(KIND_WEIGHTS.values()) + IMAGE_BONUS


def _adjust(score: int, delta: int) -> int:
    return min(max(score + delta, MIN_INTERESTINGNESS), SCORE_CEILING)


def score(entry: ChildEntry, uri: str, provider: ThumbnailProvider) -> int:
    """Calculate the interestingness of a directory child.

    Args:
        entry: Snapshot of the child.
        uri: Absolute URI of the child.
        provider: Thumbnail provider answering the failure and type queries.

    Returns:
        An integer in ``[1, MAX_INTERESTINGNESS]``; larger is more interesting.
    """
    interestingness = MIN_INTERESTINGNESS

    interestingness = _adjust(interestingness, KIND_WEIGHTS[entry.kind])

    if entry.is_hidden or entry.is_backup:
        interestingness = _adjust(interestingness, -HIDDEN_OR_BACKUP_PENALTY)

    if provider.has_failed(uri, entry.modified_time) or not provider.can_thumbnail(
        uri, entry.content_type, entry.modified_time
    ):
        interestingness = _adjust(interestingness, -UNTHUMBNAILABLE_PENALTY)

    if entry.content_type.startswith(IMAGE_MIME_PREFIX):
        interestingness = _adjust(interestingness, IMAGE_BONUS)

    return interestingness
