"""CLI entry point for crate-diff."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import click
import httpx

from crate_diff.commands import (
    diff_dependencies,
    diff_trees,
    list_versions,
    tree_diff_options,
)
from crate_diff.config import Settings
from crate_diff.errors import CrateDiffError
from crate_diff.http_client import build_client
from crate_diff.logging import configure_logging, verbosity_to_level
from crate_diff.registry import REGISTRIES, Registry, make_registry


@contextmanager
def _reported() -> Iterator[None]:
    """Turn crate-diff errors into a click error message and exit status 1."""
    try:
        yield
    except CrateDiffError as exc:
        raise click.ClickException(str(exc)) from exc


@contextmanager
def _registry(ctx: click.Context) -> Iterator[tuple[Registry, httpx.Client]]:
    settings: Settings = ctx.obj["settings"]
    with build_client(settings) as client:
        yield make_registry(ctx.obj["registry"], client, settings), client


@click.group()
@click.version_option(package_name="crate-diff")
@click.option(
    "--registry",
    type=click.Choice(REGISTRIES),
    default="crates",
    show_default=True,
    help="Registry the package is published on.",
)
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=Settings().timeout_seconds,
    show_default=True,
    help="Network timeout in seconds.",
)
@click.option("-v", "--verbose", count=True, help="Log more (repeatable).")
@click.argument("package")
@click.pass_context
def cli(
    ctx: click.Context, registry: str, timeout: float, verbose: int, package: str
) -> None:
    """Compare two published versions of PACKAGE."""
    configure_logging(level=verbosity_to_level(verbose))
    ctx.ensure_object(dict)
    ctx.obj.update(
        package=package,
        registry=registry,
        settings=Settings(timeout_seconds=timeout),
    )


@cli.command()
@click.pass_context
def versions(ctx: click.Context) -> None:
    """List published versions, oldest first, yanked ones excluded."""
    with _reported(), _registry(ctx) as (registry, _):
        found = list_versions(registry, ctx.obj["package"])
    for version in found:
        click.echo(version)


@cli.command()
@click.argument("v1")
@click.argument("v2")
@click.option(
    "--color/--no-color", default=True, show_default=True, help="Colourise the diff."
)
@click.option(
    "-x",
    "--exclude",
    "excludes",
    multiple=True,
    metavar="PATTERN",
    help="Also skip files matching PATTERN (repeatable).",
)
@click.pass_context
def diff(
    ctx: click.Context, v1: str, v2: str, color: bool, excludes: tuple[str, ...]
) -> None:
    """Diff the source trees of versions V1 and V2."""
    settings: Settings = ctx.obj["settings"]
    options = tree_diff_options(
        extra_excludes=excludes, colorize=color, excludes=settings.tree_excludes
    )
    with _reported(), _registry(ctx) as (registry, client):
        output = diff_trees(
            ctx.obj["package"],
            v1,
            v2,
            registry=registry,
            client=client,
            options=options,
        )
    # Keep the colour escapes diff produced, even when piped.
    click.echo(output, nl=False, color=color)


@cli.command()
@click.argument("v1")
@click.argument("v2")
@click.option(
    "--by-kind",
    is_flag=True,
    help="Compare normal, dev and build dependencies of the same name separately.",
)
@click.pass_context
def deps(ctx: click.Context, v1: str, v2: str, by_kind: bool) -> None:
    """Diff the declared dependencies of versions V1 and V2."""
    with _reported(), _registry(ctx) as (registry, _):
        output = diff_dependencies(
            ctx.obj["package"], v1, v2, registry=registry, by_kind=by_kind
        )
    click.echo(output, nl=False)
