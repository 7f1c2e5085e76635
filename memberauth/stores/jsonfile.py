"""Atomic JSON file persistence shared by the stores."""

from __future__ import annotations

import json
import shutil
import tempfile
from pathlib import Path
from typing import Any, Dict

from memberauth.utils.exceptions import StorageError


def atomic_write(path: Path, payload: Dict[str, Any]) -> None:
    """Atomically write JSON to the target path."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile(
        mode="w", dir=str(path.parent), delete=False, encoding="utf-8"
    ) as tf:
        temp_path = Path(tf.name)
        try:
            json.dump(payload, tf, indent=2, ensure_ascii=False, default=str)
        except Exception:
            tf.close()
            temp_path.unlink(missing_ok=True)
            raise
    try:
        shutil.move(str(temp_path), str(path))
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise


def read_json(path: Path) -> Dict[str, Any]:
    """Read a JSON object; a missing file is an empty object."""
    if not path.exists():
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        raise StorageError(f"Failed to load {path}: {e}")
    if not isinstance(raw, dict):
        raise StorageError(f"Unexpected content in {path}")
    return raw
