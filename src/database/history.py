"""
Acer Challenge - Local History Store

Keeps the player's finished rounds in a JSON file, newest last.
"""

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from src.database.models import HistoryItem

logger = logging.getLogger(__name__)

_HISTORY_ADAPTER = TypeAdapter(list[HistoryItem])


class HistoryStore:
    """Reads and writes the history file."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)

    def load(self) -> list[HistoryItem]:
        """All stored rounds; a missing or unreadable file yields an empty list."""
        if not self.path.exists():
            return []
        try:
            return _HISTORY_ADAPTER.validate_json(self.path.read_bytes())
        except ValidationError:
            logger.warning("History file %s is corrupt; starting fresh", self.path)
            return []

    def append(self, item: HistoryItem) -> list[HistoryItem]:
        """Add one round and persist the file."""
        items = self.load()
        items.append(item)
        self._write(items)
        return items

    def recent(self, limit: int = 10) -> list[HistoryItem]:
        """Newest rounds first."""
        return list(reversed(self.load()))[:limit]

    def clear(self) -> None:
        if self.path.exists():
            self.path.unlink()

    def _write(self, items: list[HistoryItem]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [item.model_dump(mode="json") for item in items]
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
