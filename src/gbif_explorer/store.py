"""Key-value JSON store for user state.

Each key maps to one JSON file under ``base_dir``. Every file is wrapped in
a metadata envelope::

    {"meta": {"key": "favorites", "saved_at": "2026-01-01T00:00:00+00:00"},
     "data": [...]}

Unreadable or malformed files read as ``None``; callers fall back to their
defaults. Keys may contain ``/`` to group files into subdirectories but can
never resolve outside ``base_dir``.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 — used at runtime, not just annotations
from typing import Any

logger = logging.getLogger(__name__)


class JsonStore:
    """Manages read/write of enveloped JSON files keyed by name."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir

    def path_for(self, key: str) -> Path:
        """Absolute file path for ``key`` (``.json`` appended)."""
        if not key or key.startswith("/"):
            msg = f"Invalid store key: {key!r}"
            raise ValueError(msg)
        return self._resolve(Path(f"{key}.json"))

    def get(self, key: str) -> Any | None:
        """Read the ``data`` payload for ``key``, or None if missing/unreadable."""
        full = self.path_for(key)
        if not full.exists():
            return None
        try:
            with full.open(encoding="utf-8") as f:
                envelope = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable store file %s: %s", full, e)
            return None
        if isinstance(envelope, dict) and "data" in envelope:
            return envelope["data"]
        return envelope

    def set(self, key: str, value: Any, **meta: Any) -> Path:
        """Write ``value`` under ``key``; extra keyword args land in ``meta``.

        Returns:
            Absolute path of the written file.
        """
        full = self.path_for(key)
        full.parent.mkdir(parents=True, exist_ok=True)

        envelope_meta: dict[str, Any] = {
            "key": key,
            "saved_at": datetime.now(UTC).isoformat(),
        }
        envelope_meta.update(meta)

        envelope = {"meta": envelope_meta, "data": value}
        with full.open("w", encoding="utf-8") as f:
            json.dump(envelope, f, indent=2, ensure_ascii=False)
        return full

    def delete(self, key: str) -> bool:
        """Remove the file for ``key``; True if something was deleted."""
        full = self.path_for(key)
        if not full.exists():
            return False
        full.unlink()
        return True

    def _resolve(self, path: Path) -> Path:
        full = self.base / path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ValueError(msg) from None
        return full
