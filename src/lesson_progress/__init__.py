"""Lesson progression and course update tracking."""

from .cli import cli
from .freshness import SEEN_STORAGE_KEY, FreshnessCache, RemoteEntity
from .navigation import (
    NavigateAction,
    SlideNavigator,
    compute_dwell_target,
    compute_next_on_finish,
    compute_target_index,
)
from .storage import FileStore, KeyValueStore, MemoryStore

__all__ = [
    "cli",
    "main",
    "FreshnessCache",
    "RemoteEntity",
    "SEEN_STORAGE_KEY",
    "NavigateAction",
    "SlideNavigator",
    "compute_dwell_target",
    "compute_next_on_finish",
    "compute_target_index",
    "FileStore",
    "KeyValueStore",
    "MemoryStore",
]


def main() -> None:
    """Entry point for the lesson-progress CLI."""
    cli()
