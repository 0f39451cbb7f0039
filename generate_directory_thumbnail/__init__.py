"""
generate_directory_thumbnail
============================

Generate a thumbnail for a directory from its most interesting child.

Given a directory, every child (files, directories, symlinks, ...) is ranked
by an 'interestingness' score indicating how good it is likely to be as a
thumbnail representing the whole directory. The thumbnail of the most
interesting child is looked up in the thumbnail cache or generated, scaled
down to the requested size, optionally marked with a folder icon, and saved
as a PNG.

Features:
    - Scores children by type, visibility, thumbnailability and image-ness.
    - Ignores child symlinks to directories to avoid endless symlink loops.
    - Bounds nested directory thumbnailing with an explicit recursion budget.
    - Reuses and fills the shared freedesktop.org thumbnail cache.
    - HEIC/HEIF image support and video frames with a film reel effect.
"""

from __future__ import annotations

from .budget import DEFAULT_RECURSION_BUDGET, RecursionBudget
from .compositor import finalize
from .errors import ExitStatus, ThumbnailerError
from .inspector import MAX_INTERESTINGNESS, score
from .models import ChildEntry, FileKind, ScoredCandidate
from .provider import FreedesktopThumbnailProvider, ThumbnailProvider, ThumbnailSize
from .resolver import resolve
from .scanner import pick_representative
from .thumbnailer import create_thumbnail_for_directory, generate_directory_thumbnail

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_RECURSION_BUDGET",
    "MAX_INTERESTINGNESS",
    "ChildEntry",
    "ExitStatus",
    "FileKind",
    "FreedesktopThumbnailProvider",
    "RecursionBudget",
    "ScoredCandidate",
    "ThumbnailProvider",
    "ThumbnailSize",
    "ThumbnailerError",
    "create_thumbnail_for_directory",
    "finalize",
    "generate_directory_thumbnail",
    "pick_representative",
    "resolve",
    "score",
]
