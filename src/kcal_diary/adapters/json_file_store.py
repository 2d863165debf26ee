"""JSON file implementation of the key-value store."""

import json
import logging
import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from kcal_diary.services.store import KeyValueStore

_logger = logging.getLogger(__name__)


@dataclass
class JsonFileKeyValueStore(KeyValueStore):
    """Keeps every slot in one JSON object on disk."""

    path: Path
    _values: dict[str, str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._values = self._read()

    def get(self, key: str) -> str | None:
        """Return the stored value for a key."""
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        """Overwrite one value and flush to disk."""
        self.set_many({key: value})

    def set_many(self, values: Mapping[str, str]) -> None:
        """Overwrite several values and flush to disk once."""
        self._values.update(values)
        self._write()

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            _logger.warning("Ignoring unreadable store file: path=%s", self.path)
            return {}
        if not isinstance(payload, dict):
            _logger.warning("Ignoring malformed store file: path=%s", self.path)
            return {}
        return {str(key): str(value) for key, value in payload.items()}

    def _write(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(self._values, handle, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
