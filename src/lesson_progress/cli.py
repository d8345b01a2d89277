"""Command-line interface for lesson navigation and update tracking."""

import asyncio
import logging
from pathlib import Path

import click

from .config import resolve_settings
from .errors import PersistFailure
from .freshness import FreshnessCache, RemoteEntity, parse_timestamp
from .navigation import NavigateAction, compute_next_on_finish, compute_target_index
from .storage import FileStore


def _validate_timestamp(ctx: click.Context, param: click.Parameter, value: str | None) -> str | None:
    if value is None:
        return None
    try:
        parse_timestamp(value)
    except ValueError as e:
        raise click.BadParameter(f"not an ISO-8601 timestamp: {value}") from e
    return value


def _open_cache(ctx: click.Context) -> FreshnessCache:
    settings = ctx.obj["settings"]

    def warn(error: Exception) -> None:
        click.echo(click.style(f"Warning: {error}", fg="yellow"), err=True)

    return FreshnessCache(
        FileStore(settings.store_path),
        key=settings.storage_key,
        on_error=warn,
    )


@click.group()
@click.version_option(package_name="lesson-progress")
@click.option(
    "--store",
    "-s",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Store file (default: $LESSON_PROGRESS_STORE, progress.toml, or ~/.lesson_progress).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, store: Path | None, verbose: bool) -> None:
    """Lesson progression and course update tracking.

    Compute slide navigation targets and keep track of which courses
    have changed since they were last opened.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["settings"] = resolve_settings(store_path=store)


@cli.command()
@click.argument("current", type=int)
@click.argument("total", type=int)
@click.option("--loop/--no-loop", default=False, help="Wrap around at either end.")
@click.option(
    "--action",
    "-a",
    type=click.Choice([a.value for a in NavigateAction]),
    default=NavigateAction.NEXT.value,
    show_default=True,
    help="Navigation direction.",
)
def step(current: int, total: int, loop: bool, action: str) -> None:
    """Print the index a prev/next step lands on."""
    click.echo(compute_target_index(current, total, loop, action))


@cli.command()
@click.argument("current", type=int)
@click.argument("total", type=int)
@click.option("--loop/--no-loop", default=False, help="Restart at the first item.")
def advance(current: int, total: int, loop: bool) -> None:
    """Print the index to auto-advance to, or 'complete'."""
    target = compute_next_on_finish(current, total, loop)
    click.echo("complete" if target is None else target)


@cli.command("mark-seen")
@click.argument("entity_id")
@click.argument("timestamp", callback=_validate_timestamp)
@click.pass_context
def mark_seen(ctx: click.Context, entity_id: str, timestamp: str) -> None:
    """Record ENTITY_ID as seen at TIMESTAMP."""
    cache = _open_cache(ctx)

    async def run() -> bool:
        await cache.load()
        task = cache.mark_seen(entity_id, timestamp)
        await cache.flush()
        return task is not None

    changed = asyncio.run(run())
    if isinstance(cache.last_error, PersistFailure):
        raise click.ClickException(str(cache.last_error))
    if changed:
        click.echo(f"Marked {entity_id} as seen at {timestamp}")
    else:
        click.echo(f"{entity_id} already seen at {timestamp}")


@cli.command()
@click.argument("entity_id")
@click.option(
    "--updated-at",
    "-u",
    default=None,
    callback=_validate_timestamp,
    help="Remote update timestamp.",
)
@click.pass_context
def check(ctx: click.Context, entity_id: str, updated_at: str | None) -> None:
    """Print whether ENTITY_ID has unseen updates."""
    cache = _open_cache(ctx)
    asyncio.run(cache.load())

    if cache.has_updates(RemoteEntity(id=entity_id, updated_at=updated_at)):
        click.echo(click.style("updated", fg="green"))
    else:
        click.echo("up-to-date")


@cli.command()
@click.pass_context
def show(ctx: click.Context) -> None:
    """List acknowledged entities and their seen timestamps."""
    cache = _open_cache(ctx)
    asyncio.run(cache.load())

    seen = cache.snapshot()
    if not seen:
        click.echo("No entities marked as seen.")
        return

    width = max(len(entity_id) for entity_id in seen)
    for entity_id in sorted(seen):
        click.echo(f"  {entity_id:<{width}}  {seen[entity_id]}")
