"""Operator preference stores."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

_logger = logging.getLogger(__name__)


class MemoryPreferenceStore:
    """Preferences kept for the lifetime of the process."""

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(initial or {})

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def as_dict(self) -> dict[str, Any]:
        return dict(self._values)


class JsonFilePreferenceStore:
    """Preferences persisted to a single JSON object file.

    The file is read once, on first access. A missing file starts empty; an
    unreadable or corrupt file is logged and also starts empty, and is
    overwritten by the next :meth:`set`. Writes go to a temporary file that
    then replaces the target.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._values: dict[str, Any] | None = None

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, Any]:
        if self._values is not None:
            return self._values
        values: dict[str, Any] = {}
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            text = ""
        except OSError as exc:
            _logger.warning("Could not read preferences from %s: %s", self._path, exc)
            text = ""
        if text.strip():
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError as exc:
                _logger.warning("Ignoring corrupt preferences file %s: %s", self._path, exc)
            else:
                if isinstance(parsed, dict):
                    values = parsed
                else:
                    _logger.warning("Ignoring preferences file %s: top level is not an object", self._path)
        self._values = values
        return values

    def get(self, key: str, default: Any = None) -> Any:
        return self._load().get(key, default)

    def set(self, key: str, value: Any) -> None:
        values = self._load()
        values[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(values, handle, indent=2, sort_keys=True)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
