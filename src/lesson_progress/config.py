"""Locate the progress store file and storage key."""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path

from .freshness import SEEN_STORAGE_KEY

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "progress.toml"
STORE_ENV_VAR = "LESSON_PROGRESS_STORE"
DEFAULT_STORE_PATH = Path.home() / ".lesson_progress" / "store.json"


@dataclass
class Settings:
    store_path: Path
    storage_key: str = SEEN_STORAGE_KEY


def load_config_file(config_path: Path) -> dict:
    """Read the [storage] table of a progress.toml, if there is one."""
    if not config_path.exists():
        return {}
    with open(config_path, "rb") as f:
        try:
            config = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            logger.warning("Ignoring malformed %s: %s", config_path, e)
            return {}
    storage = config.get("storage", {})
    return storage if isinstance(storage, dict) else {}


def resolve_settings(
    store_path: Path | None = None,
    cwd: Path | None = None,
    environ: dict[str, str] | None = None,
) -> Settings:
    """Work out where the store lives.

    Priority: explicit path, then the LESSON_PROGRESS_STORE environment
    variable, then ``[storage] path`` in ./progress.toml, then the default
    under the home directory. Relative paths in progress.toml are taken
    relative to the directory holding it.
    """
    cwd = cwd or Path.cwd()
    environ = os.environ if environ is None else environ
    storage = load_config_file(cwd / CONFIG_FILENAME)
    key = storage.get("key") or SEEN_STORAGE_KEY

    # Priority 1: explicit option
    if store_path is not None:
        return Settings(store_path=store_path, storage_key=key)

    # Priority 2: environment
    if env_path := environ.get(STORE_ENV_VAR):
        return Settings(store_path=Path(env_path), storage_key=key)

    # Priority 3: progress.toml
    if path := storage.get("path"):
        return Settings(store_path=cwd / path, storage_key=key)

    # Default
    return Settings(store_path=DEFAULT_STORE_PATH, storage_key=key)
