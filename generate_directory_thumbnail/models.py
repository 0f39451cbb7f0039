"""Snapshots of directory children and their scores."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FileKind(Enum):
    REGULAR = "regular"
    DIRECTORY = "directory"
    SYMLINK = "symlink"
    SPECIAL = "special"
    MOUNTABLE = "mountable"
    SHORTCUT = "shortcut"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class ChildEntry:
    """Metadata of one directory child, read without following symlinks."""

    name: str
    kind: FileKind
    content_type: str
    modified_time: int = 0
    is_hidden: bool = False
    is_backup: bool = False
    symlink_target: str | None = None


@dataclass(frozen=True)
class ScoredCandidate:
    entry: ChildEntry
    uri: str
    score: int
