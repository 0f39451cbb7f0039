"""Errors raised while generating a directory thumbnail.

Every error carries the process exit status the CLI reports for it.
"""

from __future__ import annotations

from enum import IntEnum


class ExitStatus(IntEnum):
    SUCCESS = 0
    INVALID_ARGUMENTS = 1
    GENERATION_FAILED = 2
    EMPTY_DIRECTORY = 3
    SAVE_FAILED = 4
    OVERLAY_LOAD_FAILED = 5


class ThumbnailerError(Exception):
    """Base class for all thumbnailer errors."""

    exit_status: ExitStatus = ExitStatus.GENERATION_FAILED


class InvalidArgumentsError(ThumbnailerError):
    exit_status = ExitStatus.INVALID_ARGUMENTS


class EmptyDirectoryError(ThumbnailerError):
    exit_status = ExitStatus.EMPTY_DIRECTORY

    def __init__(self, message: str = "Directory is empty.") -> None:
        super().__init__(message)


class ScanFailedError(ThumbnailerError):
    """Enumerating a directory failed before any candidate was found."""


class UnsupportedTypeError(ThumbnailerError):
    pass


class KnownFailedThumbnailError(ThumbnailerError):
    pass


class RecursionLimitReachedError(ThumbnailerError):
    pass


class GenerationFailedError(ThumbnailerError):
    pass


class SaveFailedError(ThumbnailerError):
    exit_status = ExitStatus.SAVE_FAILED


class OverlayLoadFailedError(ThumbnailerError):
    exit_status = ExitStatus.OVERLAY_LOAD_FAILED
