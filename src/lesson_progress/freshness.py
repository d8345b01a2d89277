"""Track which remote entities' updates the user has already seen.

The cache maps entity ids to the ``updatedAt`` timestamp the user last
acknowledged. The in-memory mapping is authoritative for the session;
the key-value store holds a best-effort mirror that is rewritten in full
after every acknowledgment.

Typical use::

    cache = FreshnessCache(FileStore(path))
    await cache.load()
    if cache.has_updates(course):
        ...
    cache.mark_seen(course.id, course.updated_at)
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Protocol

from .errors import LoadFailure, PersistFailure, ProgressError, SnapshotFormatError
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

SEEN_STORAGE_KEY = "course_updates_seen"

ErrorHandler = Callable[[ProgressError], None]


class HasTimestamp(Protocol):
    """Anything with an id and an optional update timestamp."""

    id: str
    updated_at: str | None


@dataclass(frozen=True)
class RemoteEntity:
    """Minimal view of a remote document (course, lesson, ...)."""

    id: str
    updated_at: str | None = None


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime.

    A trailing ``Z`` is accepted. Naive values are taken as UTC.

    Raises:
        ValueError: If value is not a valid ISO-8601 timestamp.
    """
    if not isinstance(value, str):
        raise ValueError(f"Timestamp must be a string, got {type(value).__name__}")
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def serialize_snapshot(seen: dict[str, str]) -> str:
    """Serialize an id -> timestamp mapping to a JSON object."""
    return json.dumps(seen, ensure_ascii=False, sort_keys=True)


def deserialize_snapshot(raw: str) -> dict[str, str]:
    """Parse a serialized snapshot.

    Raises:
        SnapshotFormatError: If raw is not a flat JSON object of strings.
    """
    try:
        data: Any = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        raise SnapshotFormatError(f"Snapshot is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise SnapshotFormatError(
            f"Snapshot must be a JSON object, got {type(data).__name__}"
        )
    for entity_id, timestamp in data.items():
        if not isinstance(timestamp, str):
            raise SnapshotFormatError(
                f"Timestamp for {entity_id!r} must be a string, got {type(timestamp).__name__}"
            )
    return data


class FreshnessCache:
    """Seen-timestamp cache with a persisted mirror.

    Args:
        store: Key-value store holding the serialized snapshot.
        key: Storage key for the snapshot.
        on_error: Called with a LoadFailure or PersistFailure whenever the
            store misbehaves. Failures are also logged and kept in
            ``last_error``; they are never raised.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key: str = SEEN_STORAGE_KEY,
        on_error: ErrorHandler | None = None,
    ) -> None:
        self._store = store
        self._key = key
        self._on_error = on_error
        self._seen: dict[str, str] = {}
        self._write_lock = asyncio.Lock()
        self._pending: set[asyncio.Task] = set()
        self._last_written: str | None = None
        self.last_error: ProgressError | None = None

    @property
    def key(self) -> str:
        return self._key

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the id -> last seen timestamp mapping."""
        return dict(self._seen)

    def last_seen(self, entity_id: str) -> str | None:
        return self._seen.get(entity_id)

    def _report(self, error: ProgressError) -> None:
        self.last_error = error
        logger.warning("%s", error)
        if self._on_error is not None:
            self._on_error(error)

    async def load(self) -> LoadFailure | None:
        """Read the persisted snapshot into memory.

        Missing data counts as an empty mapping. Entities acknowledged in
        this session before the read finished keep their in-memory value.

        Returns:
            The LoadFailure if the store failed or held malformed data,
            otherwise None. On failure the in-memory mapping is left as is
            (empty on a fresh cache).
        """
        # Writes queued by early acknowledgments wait here, then store the merge
        async with self._write_lock:
            try:
                raw = await self._store.get(self._key)
                persisted = deserialize_snapshot(raw) if raw else {}
            except Exception as e:
                failure = LoadFailure(f"Failed to load seen timestamps ({self._key}): {e}")
                failure.__cause__ = e
                self._report(failure)
                return failure

            self._seen = {**persisted, **self._seen}
            if raw:
                self._last_written = raw
        logger.debug("Loaded %d seen timestamps", len(persisted))
        return None

    def has_updates(self, entity: HasTimestamp) -> bool:
        """Check whether entity changed since the user last saw it.

        An entity without a timestamp never has updates; one that was never
        acknowledged always does. Timestamps compare chronologically, and an
        unparseable timestamp on either side reads as no updates.
        """
        updated_at = getattr(entity, "updated_at", None)
        if not updated_at:
            return False

        last_seen = self._seen.get(entity.id)
        if not last_seen:
            return True

        try:
            return parse_timestamp(updated_at) > parse_timestamp(last_seen)
        except ValueError as e:
            logger.debug("Cannot compare timestamps for %s: %s", entity.id, e)
            return False

    def mark_seen(self, entity_id: str, timestamp: str | None) -> asyncio.Task | None:
        """Record that the user has seen entity_id as of timestamp.

        The in-memory mapping is updated before this returns, so later
        ``has_updates`` calls see it immediately. The full snapshot is then
        written by a background task. Must be called with a running event
        loop.

        Returns:
            The persistence task, or None when nothing changed (no
            timestamp, or the same timestamp is already recorded).
        """
        if not timestamp:
            return None
        if self._seen.get(entity_id) == timestamp:
            return None

        loop = asyncio.get_running_loop()
        self._seen[entity_id] = timestamp

        return self._schedule_persist(loop)

    def _schedule_persist(self, loop: asyncio.AbstractEventLoop) -> asyncio.Task:
        task = loop.create_task(self._persist())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def _persist(self) -> None:
        # Serialize under the lock so the newest snapshot is always written last
        async with self._write_lock:
            raw = serialize_snapshot(self._seen)
            if raw == self._last_written:
                return
            try:
                await self._store.set(self._key, raw)
            except Exception as e:
                failure = PersistFailure(f"Failed to save seen timestamps ({self._key}): {e}")
                failure.__cause__ = e
                self._report(failure)
                return
            self._last_written = raw

    async def flush(self) -> None:
        """Wait until every scheduled write has finished."""
        while self._pending:
            await asyncio.gather(*self._pending)
