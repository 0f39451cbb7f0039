"""Looking up and generating the chosen child's thumbnail."""

from __future__ import annotations

from pathlib import Path
from typing import List

import pytest
from PIL import Image

from generate_directory_thumbnail.budget import RecursionBudget
from generate_directory_thumbnail.errors import (
    EmptyDirectoryError,
    GenerationFailedError,
    InvalidArgumentsError,
    KnownFailedThumbnailError,
    RecursionLimitReachedError,
    UnsupportedTypeError,
)
from generate_directory_thumbnail.provider import DIRECTORY_MIME_TYPE, uri_to_path
from generate_directory_thumbnail.resolver import resolve
from generate_directory_thumbnail.thumbnailer import create_thumbnail_for_directory, generate_directory_thumbnail

from .conftest import FakeThumbnailProvider, write_image

URI = "file:///photos/cover.jpg"


def _solid(uri: str, mime_type: str, budget: RecursionBudget) -> Image.Image:
    return Image.new("RGB", (40, 20), (0, 128, 0))


def test_cached_thumbnail_is_loaded(tmp_path: Path) -> None:
    cached = write_image(tmp_path / "cached.png", (64, 48))
    provider = FakeThumbnailProvider(cached={URI: cached}, generator=_solid)

    image = resolve(URI, "image/jpeg", 0, provider, RecursionBudget())

    assert image.size == (64, 48)
    assert provider.generate_calls == []


def test_corrupted_cache_entry_is_an_error(tmp_path: Path) -> None:
    cached = tmp_path / "cached.png"
    cached.write_bytes(b"not a png")
    provider = FakeThumbnailProvider(cached={URI: cached}, generator=_solid)

    with pytest.raises(GenerationFailedError):
        resolve(URI, "image/jpeg", 0, provider, RecursionBudget())
    assert provider.generate_calls == []


def test_unsupported_type_is_refused() -> None:
    provider = FakeThumbnailProvider(generator=_solid)

    with pytest.raises(UnsupportedTypeError):
        resolve(URI, "application/x-tar", 0, provider, RecursionBudget())


def test_known_failure_is_refused() -> None:
    provider = FakeThumbnailProvider(failed={URI}, generator=_solid)

    with pytest.raises(KnownFailedThumbnailError):
        resolve(URI, "image/jpeg", 0, provider, RecursionBudget())
    assert provider.generate_calls == []


def test_exhausted_budget_is_refused() -> None:
    provider = FakeThumbnailProvider(supported={DIRECTORY_MIME_TYPE}, generator=_solid)

    with pytest.raises(RecursionLimitReachedError):
        resolve("file:///photos/album", DIRECTORY_MIME_TYPE, 0, provider, RecursionBudget(0))
    assert provider.generate_calls == []


def test_directory_generation_receives_decremented_budget() -> None:
    provider = FakeThumbnailProvider(supported={DIRECTORY_MIME_TYPE}, generator=_solid)

    image = resolve("file:///photos/album", DIRECTORY_MIME_TYPE, 0, provider, RecursionBudget(3))

    assert image.size == (40, 20)
    assert provider.generate_calls == [("file:///photos/album", DIRECTORY_MIME_TYPE, RecursionBudget(2))]


def test_file_generation_keeps_budget() -> None:
    provider = FakeThumbnailProvider(generator=_solid)

    resolve(URI, "image/jpeg", 0, provider, RecursionBudget(0))

    assert provider.generate_calls == [(URI, "image/jpeg", RecursionBudget(0))]


def test_generation_failure_propagates() -> None:
    provider = FakeThumbnailProvider()

    with pytest.raises(GenerationFailedError):
        resolve(URI, "image/jpeg", 0, provider, RecursionBudget())


class NestingProvider(FakeThumbnailProvider):
    """Thumbnails directories by re-entering the pipeline in-process."""

    def __init__(self) -> None:
        super().__init__(supported={DIRECTORY_MIME_TYPE, "image/png"})
        self.nested_budgets: List[int] = []

    def generate(self, uri: str, mime_type: str, budget: RecursionBudget) -> Image.Image:
        self.generate_calls.append((uri, mime_type, budget))
        path = uri_to_path(uri)
        if mime_type == DIRECTORY_MIME_TYPE:
            self.nested_budgets.append(budget.remaining)
            return create_thumbnail_for_directory(path, self, budget)
        with Image.open(path) as img:
            img.load()
            return img.copy()


def test_nested_directory_with_budget_of_one(tmp_path: Path) -> None:
    write_image(tmp_path / "outer" / "inner" / "photo.png", (30, 10))
    provider = NestingProvider()

    image = create_thumbnail_for_directory(tmp_path / "outer", provider, RecursionBudget(1))

    assert image.size == (30, 10)
    assert provider.nested_budgets == [0]


def test_nested_directory_with_budget_of_zero(tmp_path: Path) -> None:
    write_image(tmp_path / "outer" / "inner" / "photo.png", (30, 10))
    provider = NestingProvider()

    with pytest.raises(RecursionLimitReachedError):
        create_thumbnail_for_directory(tmp_path / "outer", provider, RecursionBudget(0))


def test_two_nested_levels_need_budget_of_two(tmp_path: Path) -> None:
    write_image(tmp_path / "a" / "b" / "c" / "photo.png", (30, 10))
    provider = NestingProvider()

    with pytest.raises(RecursionLimitReachedError):
        create_thumbnail_for_directory(tmp_path / "a", provider, RecursionBudget(1))

    provider = NestingProvider()
    image = create_thumbnail_for_directory(tmp_path / "a", provider, RecursionBudget(2))
    assert image.size == (30, 10)
    assert provider.nested_budgets == [1, 0]


def test_empty_directory_is_reported(tmp_path: Path) -> None:
    with pytest.raises(EmptyDirectoryError):
        create_thumbnail_for_directory(tmp_path, FakeThumbnailProvider(), RecursionBudget())


@pytest.mark.parametrize("max_size", [0, -2])
def test_non_positive_size_is_rejected_before_scanning(tmp_path: Path, max_size: int) -> None:
    provider = FakeThumbnailProvider(generator=_solid)
    write_image(tmp_path / "album" / "cover.png", (64, 64))
    output = tmp_path / "out.png"

    with pytest.raises(InvalidArgumentsError):
        generate_directory_thumbnail(tmp_path / "album", output, provider, RecursionBudget(), max_size=max_size)

    assert provider.generate_calls == []
    assert not output.exists()
