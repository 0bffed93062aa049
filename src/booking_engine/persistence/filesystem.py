"""File-based persistence helpers for JSON data files."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from ..config import settings
from ..errors import StoreUnavailable


class FileStorage:
    """Thin wrapper around the data root for reading and writing JSON documents."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = (root or settings.data_root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def resolve(self, path: Path | str) -> Path:
        candidate = Path(path)
        return candidate if candidate.is_absolute() else self.root / candidate

    def read_json(self, path: Path | str, *, default: Any = None) -> Any:
        """Read a JSON document; return ``default`` when the file does not exist."""
        target = self.resolve(path)
        if not target.exists():
            return default
        try:
            with target.open("r", encoding="utf-8") as handle:
                return json.load(handle)
        except json.JSONDecodeError as exc:
            raise StoreUnavailable(f"Corrupt JSON document at {target}: {exc}") from exc
        except OSError as exc:
            raise StoreUnavailable(f"Unable to read {target}: {exc}") from exc

    def write_json(self, path: Path | str, data: Any, *, indent: int = 2) -> Path:
        """Write a JSON document atomically (temp file + rename)."""
        target = self.resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{target.name}.", dir=target.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False, indent=indent)
            os.replace(tmp_name, target)
        except OSError as exc:
            Path(tmp_name).unlink(missing_ok=True)
            raise StoreUnavailable(f"Unable to write {target}: {exc}") from exc
        return target
