# JSON persistence helpers with basic file locking (single-user local use)

from __future__ import annotations
from pathlib import Path
import json
import os
import time
from typing import Any, Callable


def _lock_path(p: Path) -> Path:
    return p.with_suffix(p.suffix + ".lock")


def _acquire_lock(p: Path, timeout: float = 3.0, poll: float = 0.05) -> None:
    lock = _lock_path(p)
    start = time.time()
    while True:
        try:
            # O_EXCL makes creation the test-and-set
            fd = os.open(lock, os.O_CREAT | os.O_EXCL | os.O_WRONLY)
            os.close(fd)
            return
        except FileExistsError:
            if time.time() - start > timeout:
                # Stale lock from a crashed writer
                lock.unlink(missing_ok=True)
                start = time.time()
                continue
            time.sleep(poll)


def _release_lock(p: Path) -> None:
    _lock_path(p).unlink(missing_ok=True)


def read_json(path: str | Path) -> Any:
    """Parse the JSON file at *path*; raises FileNotFoundError / ValueError."""
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_json(path: str | Path, default: Any) -> Any:
    p = Path(path)
    if not p.exists():
        return default
    return read_json(p)


def save_json(path: str | Path, data: Any) -> None:
    """Write *data* atomically: temp file in the same directory, then replace."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    _acquire_lock(p)
    try:
        tmp = p.with_suffix(p.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(tmp, p)
    finally:
        _release_lock(p)


def remove_json(path: str | Path) -> None:
    p = Path(path)
    _acquire_lock(p)
    try:
        p.unlink(missing_ok=True)
    finally:
        _release_lock(p)


def update_json(path: str | Path, update_fn: Callable[[Any], Any], default: Any) -> Any:
    p = Path(path)
    cur = load_json(p, default)
    new = update_fn(cur)
    save_json(p, new)
    return new
