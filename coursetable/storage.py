"""
Persistent cache of aggregated schedules.

This module manages one JSON file per user:

    data/cache/<sha256(ucode)>.json

with the layout

    {"cached_at": <unix seconds>, "weeks": {"1": [...], "2": [...]}}

The raw ucode is never written to disk, only its hash.
"""

from __future__ import annotations

import hashlib
import json
import time
from pathlib import Path
from typing import Dict, List, Optional

from coursetable.config import DEFAULT_CACHE_TTL
from coursetable.model import DayCourse, schedule_from_json, schedule_to_json


def _default_cache_dir() -> Path:
    """
    Return the default cache directory inside the package.

    Using a function instead of a constant makes testing easier,
    because tests can override the directory.
    """
    base_dir = Path(__file__).resolve().parent
    return base_dir / "data" / "cache"


def hash_ucode(ucode: str) -> str:
    return hashlib.sha256(ucode.strip().encode("utf-8")).hexdigest()


def _cache_path(ucode: str, cache_dir: str | Path | None) -> Path:
    base = Path(cache_dir) if cache_dir is not None else _default_cache_dir()
    return base / f"{hash_ucode(ucode)}.json"


def load_cached_schedule(
    ucode: str,
    cache_dir: str | Path | None = None,
    ttl: float = DEFAULT_CACHE_TTL,
    now: float | None = None,
) -> Optional[Dict[int, List[DayCourse]]]:
    """
    Load the cached schedule of ucode.

    Returns None if there is no entry, it is older than ttl seconds,
    or the file is unreadable. Expired entries are removed.
    """
    path = _cache_path(ucode, cache_dir)
    if not path.exists():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        cached_at = float(data["cached_at"])
        weeks = data["weeks"]
    except (OSError, json.JSONDecodeError, UnicodeDecodeError, KeyError, TypeError, ValueError):
        return None

    current = time.time() if now is None else now
    if current - cached_at >= ttl:
        clear_cached_schedule(ucode, cache_dir)
        return None

    return schedule_from_json(weeks)


def save_cached_schedule(
    ucode: str,
    schedule: Dict[int, List[DayCourse]],
    cache_dir: str | Path | None = None,
    now: float | None = None,
) -> Path:
    """
    Save schedule for ucode, replacing any previous entry. Returns the file path.
    """
    path = _cache_path(ucode, cache_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    payload = {
        "cached_at": time.time() if now is None else now,
        "weeks": schedule_to_json(schedule),
    }
    path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    return path


def clear_cached_schedule(ucode: str, cache_dir: str | Path | None = None) -> None:
    path = _cache_path(ucode, cache_dir)
    try:
        path.unlink()
    except FileNotFoundError:
        pass
