"""
Cross-process file locks guarding read-modify-write of the JSON stores.

A lock is a file created with O_EXCL next to the store it protects, holding
the owner's PID. A lock whose owner is gone, or that is older than the
timeout, is stale and gets broken.
"""

from __future__ import annotations

import os
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Generator, Optional

from memberauth.utils.exceptions import StorageError
from memberauth.utils.logger import get_logger

logger = get_logger(__name__)

LOCK_TIMEOUT_SECONDS = 10
LOCK_POLL_INTERVAL = 0.01


def lock_path_for(store_path: Path) -> Path:
    return store_path.with_name(store_path.name + ".lock")


def _read_owner(path: Path) -> Optional[int]:
    try:
        return int(path.read_text(encoding="utf-8").strip())
    except (OSError, ValueError):
        return None


def _pid_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # exists, owned by someone else
        return True
    except OSError:
        return False
    return True


def _is_stale(path: Path, max_age: float) -> bool:
    try:
        age = time.time() - path.stat().st_mtime
    except FileNotFoundError:
        return False
    if age >= max_age:
        return True
    owner = _read_owner(path)
    # an empty file is a lock still being written
    return owner is not None and not _pid_alive(owner)


def _break_lock(path: Path) -> None:
    owner = _read_owner(path)
    try:
        path.unlink()
    except FileNotFoundError:
        return
    logger.warning("Broke stale lock", path=str(path), owner=owner)


@contextmanager
def acquire_lock(path: Path, timeout_seconds: float = LOCK_TIMEOUT_SECONDS) -> Generator[None, None, None]:
    """
    Hold an exclusive lock file at `path` for the duration of the block.
    Blocks until acquired, raises StorageError after timeout_seconds.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    start = time.monotonic()
    while True:
        try:
            fd = os.open(str(path), os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            if _is_stale(path, max(timeout_seconds, LOCK_TIMEOUT_SECONDS)):
                _break_lock(path)
                continue
            if (time.monotonic() - start) >= timeout_seconds:
                raise StorageError(f"Could not acquire lock {path} within {timeout_seconds}s")
            time.sleep(LOCK_POLL_INTERVAL)
            continue
        try:
            os.write(fd, str(os.getpid()).encode())
        finally:
            os.close(fd)
        break

    try:
        yield
    finally:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
