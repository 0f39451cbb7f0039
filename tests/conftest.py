"""Shared fixtures: an in-memory thumbnail provider and image helpers."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, List, Set, Tuple

import pytest
from PIL import Image

from generate_directory_thumbnail.budget import RecursionBudget
from generate_directory_thumbnail.errors import GenerationFailedError


class FakeThumbnailProvider:
    """Provider answering from dictionaries instead of the thumbnail cache."""

    def __init__(
        self,
        supported: Set[str] | None = None,
        cached: Dict[str, Path] | None = None,
        failed: Set[str] | None = None,
        generator: Callable[[str, str, RecursionBudget], Image.Image] | None = None,
    ) -> None:
        self.supported = supported if supported is not None else {"text/plain", "image/jpeg", "image/png"}
        self.cached = cached or {}
        self.failed = failed or set()
        self.generator = generator
        self.generate_calls: List[Tuple[str, str, RecursionBudget]] = []

    def lookup(self, uri: str, mtime: int) -> Path | None:
        return self.cached.get(uri)

    def can_thumbnail(self, uri: str, mime_type: str, mtime: int) -> bool:
        return mime_type in self.supported

    def has_failed(self, uri: str, mtime: int) -> bool:
        return uri in self.failed

    def generate(self, uri: str, mime_type: str, budget: RecursionBudget) -> Image.Image:
        self.generate_calls.append((uri, mime_type, budget))
        if self.generator is None:
            raise GenerationFailedError(f"Error generating thumbnail for file ‘{uri}’.")
        return self.generator(uri, mime_type, budget)


@pytest.fixture
def provider() -> FakeThumbnailProvider:
    return FakeThumbnailProvider()


def write_image(path: Path, size: Tuple[int, int], color: Tuple[int, int, int] = (200, 30, 30)) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    Image.new("RGB", size, color).save(path)
    return path
