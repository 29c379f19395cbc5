"""JSON-file-backed implementation of LocalStore.

The whole store is one JSON object of ``key -> string``, mirroring the
device's async key/value storage.  Each write rewrites the file.
"""

from __future__ import annotations

import json
from pathlib import Path

from storefront.domain.repository.local_store import LocalStore


class JsonLocalStore(LocalStore):

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._ensure_file()

    # --- LocalStore interface -------------------------------------------------

    def get(self, key: str) -> str | None:
        value = self._load_raw().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._load_raw()
        data[key] = value
        self._persist_raw(data)

    def remove(self, key: str) -> None:
        data = self._load_raw()
        if data.pop(key, None) is not None:
            self._persist_raw(data)

    # --- File helpers ---------------------------------------------------------

    def _load_raw(self) -> dict[str, str]:
        try:
            data = json.loads(self._file_path.read_text(encoding="utf-8"))
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def _persist_raw(self, data: dict[str, str]) -> None:
        self._file_path.write_text(
            json.dumps(data, indent=2, sort_keys=True) + "\n", encoding="utf-8"
        )

    def _ensure_file(self) -> None:
        if not self._file_path.exists():
            self._file_path.parent.mkdir(parents=True, exist_ok=True)
            self._file_path.write_text("{}", encoding="utf-8")
