"""Pick the most interesting child of a directory.

Child symlinks to directories are always ignored, so an endless loop of
directory symlinks can never turn into endless nested thumbnailing.
"""

from __future__ import annotations

import logging
import mimetypes
import os
import stat
from pathlib import Path
from typing import Iterable, Iterator, Set, Tuple

from tqdm import tqdm

from .errors import ScanFailedError
from .inspector import MAX_INTERESTINGNESS, score
from .models import ChildEntry, FileKind, ScoredCandidate
from .provider import DIRECTORY_MIME_TYPE, ThumbnailProvider

logger = logging.getLogger(__name__)

HIDDEN_LIST_FILENAME = ".hidden"
FALLBACK_MIME_TYPE = "application/octet-stream"
EMPTY_FILE_MIME_TYPE = "application/x-zerosize"


def _read_hidden_names(directory: Path) -> Set[str]:
    """Names listed in the directory's ``.hidden`` file, one per line."""
    try:
        text = (directory / HIDDEN_LIST_FILENAME).read_text(encoding="utf-8", errors="replace")
    except OSError:
        return set()
    return {line.strip() for line in text.splitlines() if line.strip()}


def _kind_and_type(entry: os.DirEntry, st: os.stat_result) -> Tuple[FileKind, str]:
    mode = st.st_mode
    if stat.S_ISLNK(mode):
        guessed, _ = mimetypes.guess_type(entry.name)
        return FileKind.SYMLINK, guessed or FALLBACK_MIME_TYPE
    if stat.S_ISDIR(mode):
        return FileKind.DIRECTORY, DIRECTORY_MIME_TYPE
    if stat.S_ISREG(mode):
        if st.st_size == 0:
            return FileKind.REGULAR, EMPTY_FILE_MIME_TYPE
        guessed, _ = mimetypes.guess_type(entry.name)
        return FileKind.REGULAR, guessed or FALLBACK_MIME_TYPE
    if stat.S_ISCHR(mode):
        return FileKind.SPECIAL, "inode/chardevice"
    if stat.S_ISBLK(mode):
        return FileKind.SPECIAL, "inode/blockdevice"
    if stat.S_ISFIFO(mode):
        return FileKind.SPECIAL, "inode/fifo"
    if stat.S_ISSOCK(mode):
        return FileKind.SPECIAL, "inode/socket"
    return FileKind.UNKNOWN, FALLBACK_MIME_TYPE


def iter_children(directory: Path) -> Iterator[ChildEntry]:
    """Yield a snapshot of each immediate child of ``directory``.

    Symlinks are never followed. Errors opening or reading the directory
    propagate as ``OSError`` from the iteration.
    """
    hidden_names = _read_hidden_names(directory)
    with os.scandir(directory) as it:
        for entry in it:
            st = entry.stat(follow_symlinks=False)
            kind, content_type = _kind_and_type(entry, st)
            yield ChildEntry(
                name=entry.name,
                kind=kind,
                content_type=content_type,
                modified_time=int(st.st_mtime),
                is_hidden=entry.name.startswith(".") or entry.name in hidden_names,
                is_backup=entry.name.endswith("~"),
                symlink_target=os.readlink(entry.path) if kind is FileKind.SYMLINK else None,
            )


def _is_symlink_to_directory(directory: Path, entry: ChildEntry) -> bool:
    if entry.kind is not FileKind.SYMLINK or entry.symlink_target is None:
        return False
    target = directory / entry.symlink_target
    logger.debug("Checking target ‘%s’ for symlink ‘%s’.", entry.symlink_target, entry.name)
    # os.path.isdir follows links and reports False on ELOOP.
    return os.path.isdir(target)


def select_best(
    directory: Path,
    children: Iterable[ChildEntry],
    provider: ThumbnailProvider,
) -> ScoredCandidate | None:
    """Track the highest scoring child among ``children``.

    Ties keep the first child seen. Scanning stops as soon as a child reaches
    ``MAX_INTERESTINGNESS``. An ``OSError`` raised by ``children`` is ignored
    when a candidate has already been found, otherwise it is re-raised as
    ``ScanFailedError``.
    """
    best: ScoredCandidate | None = None
    iterator = iter(children)

    while True:
        try:
            entry = next(iterator)
        except StopIteration:
            break
        except OSError as exc:
            if best is None:
                raise ScanFailedError(f"Error enumerating directory ‘{directory}’: {exc}") from exc
            logger.debug(
                "Ignoring enumeration error in ‘%s’ after finding ‘%s’: %s",
                directory,
                best.entry.name,
                exc,
            )
            break

        if _is_symlink_to_directory(directory, entry):
            logger.debug(
                "Skipping file ‘%s’ as it’s a symlink to a directory, and could cause an infinite loop.",
                entry.name,
            )
            continue

        uri = (directory / entry.name).absolute().as_uri()
        interestingness = score(entry, uri, provider)
        logger.debug("Examining file ‘%s’ with interestingness %d.", entry.name, interestingness)

        if best is None or interestingness > best.score:
            best = ScoredCandidate(entry=entry, uri=uri, score=interestingness)
            logger.debug("Updating most interesting file to ‘%s’ with interestingness %d.", uri, interestingness)

            if interestingness >= MAX_INTERESTINGNESS:
                logger.debug(
                    "Interestingness reached maximum of %d. Breaking out with most interesting file ‘%s’.",
                    MAX_INTERESTINGNESS,
                    uri,
                )
                break

    return best


def pick_representative(
    directory: Path,
    provider: ThumbnailProvider,
    show_progress: bool = False,
) -> ScoredCandidate | None:
    """Pick the child which best represents ``directory``.

    Returns ``None`` for an empty directory. Raises ``ScanFailedError`` when
    the directory cannot be enumerated and no candidate was found.
    """
    children: Iterable[ChildEntry] = iter_children(directory)
    pbar = tqdm(desc="Scanning children", unit=" file", leave=False) if show_progress else None
    if pbar is not None:
        children = _counted(children, pbar)
    try:
        return select_best(directory, children, provider)
    finally:
        if pbar is not None:
            pbar.close()
        if hasattr(children, "close"):
            children.close()


def _counted(children: Iterable[ChildEntry], pbar: tqdm) -> Iterator[ChildEntry]:
    for child in children:
        pbar.update(1)
        yield child
