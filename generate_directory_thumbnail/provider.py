"""Thumbnail providers: cache lookup, capability checks and generation.

The production provider follows the freedesktop.org thumbnail managing
standard: thumbnails live under ``$XDG_CACHE_HOME/thumbnails/<size>/`` named
after the MD5 of the file URI, and are only valid while their
``Thumb::MTime`` text chunk matches the file's modification time.
"""

from __future__ import annotations

import hashlib
import logging
import os
import subprocess
import sys
import tempfile
from enum import Enum
from pathlib import Path
from typing import Protocol, Set
from urllib.parse import unquote_to_bytes, urlparse

import cv2
from PIL import Image, ImageDraw, ImageOps, PngImagePlugin
from pillow_heif import register_heif_opener

from .budget import RecursionBudget
from .errors import GenerationFailedError

# Register HEIC support for Pillow
register_heif_opener()

logger = logging.getLogger(__name__)

DIRECTORY_MIME_TYPE = "inode/directory"
FAILED_THUMBNAILS_APP = "generate-directory-thumbnail"
FILM_REEL_BAR_RATIO = 0.1


class ThumbnailSize(Enum):
    """freedesktop.org thumbnail size classes."""

    NORMAL = 128
    LARGE = 256

    @property
    def pixels(self) -> int:
        return self.value

    @property
    def directory_name(self) -> str:
        return self.name.lower()

    @classmethod
    def for_output_size(cls, output_size: int | None) -> ThumbnailSize:
        """Pick the size class able to serve an output of ``output_size`` pixels."""
        if output_size is None or output_size <= cls.NORMAL.pixels:
            return cls.NORMAL
        return cls.LARGE


class ThumbnailProvider(Protocol):
    def lookup(self, uri: str, mtime: int) -> Path | None:
        """Return the path of a valid cached thumbnail, if any."""

    def can_thumbnail(self, uri: str, mime_type: str, mtime: int) -> bool:
        """Whether a thumbnail can be generated for this type at all."""

    def has_failed(self, uri: str, mtime: int) -> bool:
        """Whether generation previously failed for this URI and mtime."""

    def generate(self, uri: str, mime_type: str, budget: RecursionBudget) -> Image.Image:
        """Generate a thumbnail, raising GenerationFailedError on failure."""


def uri_to_path(uri: str) -> Path:
    parsed = urlparse(uri)
    if parsed.scheme != "file":
        raise ValueError(f"Not a local file URI: {uri}")
    # Percent-escapes carry the raw filesystem bytes, which need not be UTF-8.
    return Path(os.fsdecode(unquote_to_bytes(parsed.path)))


def default_cache_root() -> Path:
    cache_home = os.environ.get("XDG_CACHE_HOME") or os.path.join(Path.home(), ".cache")
    return Path(cache_home) / "thumbnails"


def _pillow_mime_types() -> Set[str]:
    Image.init()
    return set(Image.MIME.values()) | {"image/heic", "image/heif"}


def _middle_video_frame(path: Path) -> Image.Image:
    """Grab the frame halfway through a video, framed by film reel bars."""
    capture = cv2.VideoCapture(str(path))
    try:
        if not capture.isOpened():
            raise GenerationFailedError(f"Error opening video ‘{path}’.")
        frame_count = int(capture.get(cv2.CAP_PROP_FRAME_COUNT))
        capture.set(cv2.CAP_PROP_POS_FRAMES, frame_count // 2)
        ok, frame = capture.read()
    finally:
        capture.release()
    if not ok:
        raise GenerationFailedError(f"Error reading frame {frame_count // 2} of {frame_count} from video ‘{path}’.")

    image = Image.fromarray(cv2.cvtColor(frame, cv2.COLOR_BGR2RGB))
    bar = int(image.height * FILM_REEL_BAR_RATIO)
    if bar:
        draw = ImageDraw.Draw(image)
        draw.rectangle((0, 0, image.width - 1, bar - 1), fill="black")
        draw.rectangle((0, image.height - bar, image.width - 1, image.height - 1), fill="black")
    return image


class FreedesktopThumbnailProvider:
    """Provider backed by the shared freedesktop.org thumbnail cache."""

    def __init__(self, size: ThumbnailSize, cache_root: Path | None = None) -> None:
        self.size = size
        self.cache_root = cache_root if cache_root is not None else default_cache_root()
        self._image_mime_types = _pillow_mime_types()

    def _thumbnail_path(self, uri: str) -> Path:
        digest = hashlib.md5(uri.encode("utf-8")).hexdigest()
        return self.cache_root / self.size.directory_name / f"{digest}.png"

    def _failed_path(self, uri: str) -> Path:
        digest = hashlib.md5(uri.encode("utf-8")).hexdigest()
        return self.cache_root / "fail" / FAILED_THUMBNAILS_APP / f"{digest}.png"

    @staticmethod
    def _is_valid_for(path: Path, mtime: int) -> bool:
        try:
            with Image.open(path) as img:
                return img.info.get("Thumb::MTime") == str(mtime)
        except (OSError, SyntaxError, ValueError):
            return False

    def lookup(self, uri: str, mtime: int) -> Path | None:
        path = self._thumbnail_path(uri)
        if path.is_file() and self._is_valid_for(path, mtime):
            return path
        return None

    def has_failed(self, uri: str, mtime: int) -> bool:
        path = self._failed_path(uri)
        return path.is_file() and self._is_valid_for(path, mtime)

    def can_thumbnail(self, uri: str, mime_type: str, mtime: int) -> bool:
        if not uri.startswith("file:"):
            return False
        return (
            mime_type == DIRECTORY_MIME_TYPE
            or mime_type.startswith("video/")
            or mime_type in self._image_mime_types
        )

    def generate(self, uri: str, mime_type: str, budget: RecursionBudget) -> Image.Image:
        path = uri_to_path(uri)
        try:
            mtime = int(path.lstat().st_mtime)
        except OSError as exc:
            raise GenerationFailedError(f"Error generating thumbnail for file ‘{uri}’: {exc}") from exc

        try:
            if mime_type == DIRECTORY_MIME_TYPE:
                thumbnail = self._generate_for_directory(path, budget)
            elif mime_type.startswith("video/"):
                thumbnail = _middle_video_frame(path)
            else:
                with Image.open(path) as img:
                    thumbnail = ImageOps.exif_transpose(img)
                    thumbnail.load()
            thumbnail.thumbnail((self.size.pixels, self.size.pixels), Image.LANCZOS)
            if thumbnail.mode not in ("RGB", "RGBA", "L", "LA"):
                thumbnail = thumbnail.convert("RGBA")
        except (OSError, ValueError, cv2.error, GenerationFailedError) as exc:
            # Nested directory failures depend on the recursion budget, not the file.
            if mime_type != DIRECTORY_MIME_TYPE:
                self._save(self._failed_path(uri), Image.new("RGBA", (1, 1)), uri, mtime)
            if isinstance(exc, GenerationFailedError):
                raise
            raise GenerationFailedError(f"Error generating thumbnail for file ‘{uri}’: {exc}") from exc

        self._save(self._thumbnail_path(uri), thumbnail, uri, mtime)
        return thumbnail

    def _generate_for_directory(self, directory: Path, budget: RecursionBudget) -> Image.Image:
        """Thumbnail a nested directory by running this program in a subprocess."""
        with tempfile.TemporaryDirectory(prefix="directory-thumbnail-") as tmp:
            output_file = Path(tmp) / "thumbnail.png"
            command = [
                sys.executable,
                "-m",
                "generate_directory_thumbnail",
                "--size",
                str(self.size.pixels),
                "--recursion-budget",
                str(budget.remaining),
                "--cache-dir",
                str(self.cache_root),
                str(directory),
                str(output_file),
            ]
            logger.debug("Spawning nested thumbnailer: %s", " ".join(command))
            result = subprocess.run(command, capture_output=True, text=True, check=False)
            if result.returncode != 0:
                raise GenerationFailedError(
                    f"Error generating thumbnail for directory ‘{directory}’: "
                    f"nested thumbnailer exited with status {result.returncode}: {result.stderr.strip()}"
                )
            with Image.open(output_file) as img:
                img.load()
                return img.copy()

    def _save(self, path: Path, image: Image.Image, uri: str, mtime: int) -> None:
        info = PngImagePlugin.PngInfo()
        info.add_text("Thumb::URI", uri)
        info.add_text("Thumb::MTime", str(mtime))
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            image.save(path, "PNG", pnginfo=info)
        except OSError as exc:
            logger.warning("Couldn’t write thumbnail cache entry ‘%s’: %s", path, exc)
