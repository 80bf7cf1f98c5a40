"""JSON file helpers for the file-backed session store."""

from __future__ import annotations

import os
import re
import json
import hashlib
import logging
import contextlib
from typing import Any
from pathlib import Path

logger = logging.getLogger(__name__)

JsonValue = Any
PathLike = str | os.PathLike[str]

_SAFE_NAME_RE = re.compile(r"^[A-Za-z0-9_-][A-Za-z0-9_.-]{0,127}$")


def _coerce_path(path: PathLike) -> Path:
    """Coerce an input path into a Path object."""
    return path if isinstance(path, Path) else Path(path)


def record_filename(session_key: str) -> str:
    """Map a session key to a filesystem-safe file name.

    Keys made of plain identifier characters are used as-is so records stay
    easy to find on disk; anything else is hashed.
    """
    if _SAFE_NAME_RE.match(session_key):
        return f"{session_key}.json"
    digest = hashlib.sha256(session_key.encode("utf-8")).hexdigest()[:40]
    return f"key-{digest}.json"


def read_json_file(path: PathLike, *, encoding: str = "utf-8") -> JsonValue | None:
    """Load a JSON document, returning None when the file is missing or invalid."""
    resolved = _coerce_path(path)
    try:
        with resolved.open(encoding=encoding) as fh:
            return json.load(fh)
    except FileNotFoundError:
        return None
    except json.JSONDecodeError as exc:
        logger.warning("Failed to decode JSON from %s: %s", resolved, exc)
    except OSError as exc:
        logger.warning("Failed to read %s: %s", resolved, exc)
    return None


def write_json_file(
    path: PathLike,
    data: JsonValue,
    *,
    encoding: str = "utf-8",
    ensure_dir: bool = True,
) -> bool:
    """Write JSON by atomically replacing the destination. Returns success."""
    resolved = _coerce_path(path)
    tmp_path = resolved.with_suffix(resolved.suffix + ".tmp")

    if ensure_dir:
        resolved.parent.mkdir(parents=True, exist_ok=True)

    try:
        with tmp_path.open("w", encoding=encoding) as fh:
            json.dump(data, fh, ensure_ascii=False, indent=2)
            fh.write("\n")
        os.replace(tmp_path, resolved)
        return True
    except (OSError, TypeError, ValueError) as exc:
        logger.warning("Failed to write JSON to %s: %s", resolved, exc)
        with contextlib.suppress(OSError):
            os.remove(tmp_path)
        return False


__all__ = ["record_filename", "read_json_file", "write_json_file"]
