# price_tracker/storage/json_file.py

"""Atomic JSON read/write helpers for the durable state files."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from price_tracker.errors import StoreWriteError

logger = logging.getLogger("price_tracker.storage")


def load_json(path: Path, fallback: Any) -> Any:
    """Read JSON from *path*, returning *fallback* if absent or unreadable.

    A corrupt or unreadable file is logged as a warning and never
    raised: losing history is acceptable, crashing on start is not.
    """
    if not path.exists():
        logger.info("State file %s not found, starting fresh", path)
        return fallback
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as exc:
        logger.warning(
            "Could not read state file %s (%s), using defaults",
            path,
            exc,
        )
        return fallback


def write_json_atomic(path: Path, data: Any) -> None:
    """Write *data* to *path* via a temp file and ``os.replace``.

    Readers see either the previous file or the complete new one.
    Raises :class:`StoreWriteError` on any I/O or serialisation error.
    """
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_name = f.name
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except (OSError, TypeError, ValueError) as exc:
        raise StoreWriteError(f"Failed to write {path}: {exc}") from exc
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.debug("Temp file %s already gone", tmp_name)
