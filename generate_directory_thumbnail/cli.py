"""Command line entry point: generate a thumbnail for a directory."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from .budget import RECURSION_BUDGET_ENVVAR, RecursionBudget
from .errors import (
    ExitStatus,
    InvalidArgumentsError,
    OverlayLoadFailedError,
    SaveFailedError,
    ThumbnailerError,
)
from .log import setup_logging
from .provider import FreedesktopThumbnailProvider, ThumbnailSize, uri_to_path
from .thumbnailer import generate_directory_thumbnail

NO_SIZE_LIMIT = -1


class ThumbnailerCommand(click.Command):
    """Report command line usage errors with the invalid-arguments status."""

    def make_context(self, info_name, args, parent=None, **extra):
        try:
            return super().make_context(info_name, args, parent=parent, **extra)
        except click.UsageError as exc:
            exc.exit_code = ExitStatus.INVALID_ARGUMENTS
            raise


def _path_or_uri(ctx: click.Context, param: click.Parameter, value: str) -> Path:
    if value.startswith("file://"):
        try:
            return uri_to_path(value)
        except ValueError as exc:
            raise click.BadParameter(str(exc), ctx=ctx, param=param) from exc
    return Path(value)


@click.command(cls=ThumbnailerCommand)
@click.argument("input_directory", callback=_path_or_uri)
@click.argument("output_file", callback=_path_or_uri)
@click.option(
    "-s",
    "--size",
    type=int,
    default=NO_SIZE_LIMIT,
    show_default=True,
    help="Maximum size of the thumbnail in pixels (maximum width or height); -1 for no limit.",
)
@click.option(
    "--overlay/--no-overlay",
    default=False,
    show_default=True,
    help="Mark the thumbnail with a folder icon.",
)
@click.option(
    "--overlay-icon",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Image to use as the folder icon instead of the built-in one.",
)
@click.option(
    "--recursion-budget",
    envvar=RECURSION_BUDGET_ENVVAR,
    show_envvar=True,
    default=None,
    help="How many levels of directories inside directories may be thumbnailed (default 5).",
)
@click.option(
    "--cache-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Root of the thumbnail cache (default: $XDG_CACHE_HOME/thumbnails).",
)
@click.option(
    "--progress",
    is_flag=True,
    default=False,
    help="Show progress while scanning the directory.",
)
@click.option("-v", "--verbose", is_flag=True, default=False, help="Print debug messages.")
def main(
    input_directory: Path,
    output_file: Path,
    size: int,
    overlay: bool,
    overlay_icon: Path | None,
    recursion_budget: str | None,
    cache_dir: Path | None,
    progress: bool,
    verbose: bool,
) -> None:
    """Generate a thumbnail for INPUT_DIRECTORY and save it as a PNG to OUTPUT_FILE."""
    logger = setup_logging(verbose)

    budget = RecursionBudget.parse(recursion_budget)
    max_size = None if size == NO_SIZE_LIMIT else size
    thumbnail_size = ThumbnailSize.for_output_size(max_size)
    provider = FreedesktopThumbnailProvider(thumbnail_size, cache_root=cache_dir)

    logger.info("Input directory: %s", input_directory)
    logger.info("Thumbnail size class: %s", thumbnail_size.directory_name)
    logger.info("Recursion budget: %d", budget.remaining)

    try:
        generate_directory_thumbnail(
            input_directory,
            output_file,
            provider,
            budget,
            max_size=max_size,
            show_overlay=overlay,
            overlay_icon=overlay_icon,
            show_progress=progress,
        )
    except InvalidArgumentsError as exc:
        click.secho(f"Invalid value for '--size': {exc} Use {NO_SIZE_LIMIT} for no limit.", fg="red", err=True)
        sys.exit(exc.exit_status)
    except SaveFailedError as exc:
        click.secho(f"Couldn’t save thumbnail to ‘{output_file}’: {exc}", fg="red", err=True)
        sys.exit(exc.exit_status)
    except OverlayLoadFailedError as exc:
        click.secho(str(exc), fg="red", err=True)
        sys.exit(exc.exit_status)
    except ThumbnailerError as exc:
        click.secho(
            f"Couldn’t generate thumbnail for directory ‘{input_directory}’: {exc}",
            fg="red",
            err=True,
        )
        sys.exit(exc.exit_status)

    logger.info("Thumbnail saved to %s", output_file)
    logger.debug("Exiting with status %d.", ExitStatus.SUCCESS)
