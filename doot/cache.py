"""Loading and saving the installed-files cache."""

from __future__ import annotations

import os
from pathlib import Path

from doot import log
from doot.colfer import ColferMaxError, DootCache
from doot.constants import ENV_DOOT_CACHE_DIR
from doot.paths import AbsolutePath

CURRENT_CACHE_VERSION = 2
CACHE_FILE_NAME = "doot-cache.bin"


def compute_cache_key(dotfiles_dir: AbsolutePath, target_dir: str) -> str:
    """Key identifying one dotfiles directory installed into one target directory."""
    return str(dotfiles_dir) + os.pathsep + target_dir


def _new_cache() -> DootCache:
    return DootCache(version=CURRENT_CACHE_VERSION, entries=[])


def _cache_containing_dir() -> str:
    cache_dir = os.environ.get(ENV_DOOT_CACHE_DIR, "")
    if cache_dir:
        return cache_dir
    try:
        home = str(Path.home())
    except RuntimeError as exc:
        log.fatal("Error retrieving home directory: %s", exc)
    return os.path.join(home, ".cache", "doot")


def cache_path() -> str:
    """Path of the cache file, creating its directory if needed."""
    cache_dir = _cache_containing_dir()
    try:
        os.makedirs(cache_dir, mode=0o755, exist_ok=True)
    except OSError as exc:
        log.fatal("Error creating cache directory: %s", exc)
    return os.path.join(cache_dir, CACHE_FILE_NAME)


def load() -> DootCache:
    """Read the cache file, or return an empty cache if it is missing or unusable."""
    try:
        contents = Path(cache_path()).read_bytes()
    except OSError as exc:
        log.info("Cache read error: %s, creating new cache", exc)
        return _new_cache()

    try:
        cache = DootCache.from_bytes(contents)
    except (ValueError, EOFError) as exc:
        log.warning("Error parsing cache file: %s, creating new cache", exc or "EOF")
        return _new_cache()

    if cache.version != CURRENT_CACHE_VERSION:
        log.info("Cache version mismatch: expected %d, got %d", CURRENT_CACHE_VERSION, cache.version)
        return _new_cache()
    return cache


def save(cache: DootCache) -> None:
    """Write the cache file; failures are reported, not raised."""
    try:
        data = cache.encode()
    except (ColferMaxError, ValueError) as exc:
        log.error("Error marshalling cache data: %s", exc)
        return
    path = cache_path()
    try:
        with open(path, "wb") as handle:
            handle.write(data)
        os.chmod(path, 0o644)
    except OSError as exc:
        log.error("Error saving cache file: %s", exc)