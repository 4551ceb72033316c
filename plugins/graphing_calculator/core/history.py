"""Encrypted persistence of evaluated expressions."""

from __future__ import annotations

import json
import math
import threading
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

from common.logging import get_logger

from .cipher import CipherError, TextCipher, write_private_text

_DEFAULT_MAX_ITEMS = 500

logger = get_logger(__name__)


class HistoryError(RuntimeError):
    """Raised when stored history cannot be read back or written."""


@dataclass(frozen=True, slots=True)
class HistoryItem:
    """One recorded evaluation."""

    id: str
    expression: str
    result: float
    timestamp: str

    @classmethod
    def create(cls, expression: str, result: float) -> "HistoryItem":
        return cls(
            id=uuid.uuid4().hex,
            expression=expression,
            result=float(result),
            timestamp=datetime.now(timezone.utc).isoformat(),
        )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "HistoryItem":
        try:
            item = cls(
                id=str(payload["id"]),
                expression=str(payload["expression"]),
                result=float(payload["result"]),
                timestamp=str(payload["timestamp"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise HistoryError("History record is malformed") from exc
        if not math.isfinite(item.result):
            raise HistoryError("History record holds a non-finite result")
        return item

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


class HistoryStore:
    """Newest-first history list, optionally persisted as an encrypted file.

    With ``path`` unset the items live in memory only.
    """

    def __init__(
        self,
        path: Path | None = None,
        cipher: TextCipher | None = None,
        *,
        max_items: int = _DEFAULT_MAX_ITEMS,
    ) -> None:
        self.path = Path(path) if path else None
        self.cipher = cipher or TextCipher()
        self.max_items = max(int(max_items), 1)
        self._items: list[HistoryItem] = []
        self._lock = threading.Lock()

    def _read_locked(self) -> list[HistoryItem]:
        if self.path is None:
            return list(self._items)
        if not self.path.exists():
            return []
        token = self.path.read_text(encoding="utf-8")
        if not token.strip():
            return []
        try:
            records = json.loads(self.cipher.decrypt(token))
        except CipherError as exc:
            raise HistoryError("Stored history could not be decrypted") from exc
        except json.JSONDecodeError as exc:
            raise HistoryError("Stored history is not valid JSON") from exc
        if not isinstance(records, list):
            raise HistoryError("Stored history must be a list")
        return [HistoryItem.from_dict(record) for record in records]

    def _write_locked(self, items: list[HistoryItem], cipher: TextCipher | None = None) -> None:
        items = items[: self.max_items]
        if self.path is None:
            self._items = items
            return
        payload = json.dumps([item.to_dict() for item in items])
        try:
            write_private_text(self.path, (cipher or self.cipher).encrypt(payload))
        except CipherError as exc:
            raise HistoryError("History could not be encrypted") from exc
        except OSError as exc:
            raise HistoryError(f"History could not be written: {exc}") from exc

    def load(self) -> list[HistoryItem]:
        with self._lock:
            return self._read_locked()

    def add(self, expression: str, result: float) -> HistoryItem:
        item = HistoryItem.create(expression, result)
        with self._lock:
            items = self._read_locked()
            items.insert(0, item)
            self._write_locked(items)
        logger.info("recorded history item %s", item.id)
        return item

    def delete(self, item_id: str) -> None:
        with self._lock:
            items = self._read_locked()
            remaining = [item for item in items if item.id != item_id]
            if len(remaining) == len(items):
                raise KeyError(f"History item '{item_id}' not found")
            self._write_locked(remaining)

    def clear(self) -> None:
        with self._lock:
            self._items = []
            if self.path is not None:
                self.path.unlink(missing_ok=True)
        logger.info("cleared history")

    def rotate_key(self) -> int:
        """Re-encrypt the stored items under a new key and return their count.

        The new key is only saved once the re-encrypted history is in place, so
        a failed write leaves the previous key and file untouched.
        """

        with self._lock:
            items = self._read_locked()
            fresh = self.cipher.successor()
            if self.path is not None and items:
                self._write_locked(items, fresh)
            try:
                self.cipher.adopt(fresh)
            except OSError as exc:
                raise HistoryError(f"History key could not be saved: {exc}") from exc
        logger.info("rotated history key (%d items re-encrypted)", len(items))
        return len(items)


__all__ = ["HistoryError", "HistoryItem", "HistoryStore"]
