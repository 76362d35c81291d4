"""Process-local cache over load_config, keyed by resolved config path."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path

from rpcwire.config.loader import get_config_path, load_config
from rpcwire.config.schema import Config


@dataclass(slots=True)
class _Entry:
    config: Config
    mtime_ns: int | None


_lock = threading.RLock()
_cache: dict[Path, _Entry] = {}


def _resolve(config_path: Path | None) -> Path:
    return Path(config_path or get_config_path()).expanduser().resolve()


def _mtime_ns(path: Path) -> int | None:
    try:
        return path.stat().st_mtime_ns
    except FileNotFoundError:
        return None


def get_config(*, config_path: Path | None = None, force_reload: bool = False) -> Config:
    """Return the cached Config for ``config_path``; a file changed on disk is reloaded."""
    path = _resolve(config_path)
    stamp = _mtime_ns(path)
    with _lock:
        entry = _cache.get(path)
        if force_reload or entry is None or entry.mtime_ns != stamp:
            entry = _Entry(load_config(path), stamp)
            _cache[path] = entry
        return entry.config


def clear_config_cache(*, config_path: Path | None = None) -> None:
    """Drop one cached entry, or all of them when no path is given."""
    with _lock:
        if config_path is None:
            _cache.clear()
        else:
            _cache.pop(_resolve(config_path), None)
