"""Persist a user's calculator history under ``history_<userId>``."""

from typing import Optional

from loguru import logger

from model.History import CALCULATOR_HISTORY_CAPACITY, HistoryBuffer, HistoryEntry
from services.storage import KeyValueStore, load_json_list, save_json


def history_key(user_id: str) -> str:
    return f"history_{user_id}"


class HistoryStore:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def load(self, user_id: str, capacity: int = CALCULATOR_HISTORY_CAPACITY) -> HistoryBuffer:
        """Read the stored entries (newest first) into a buffer."""
        entries = []
        for raw in load_json_list(self.store, history_key(user_id)):
            try:
                entries.append(HistoryEntry.from_dict(raw))
            except (AttributeError, KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed history entry: {}", raw)
        return HistoryBuffer(capacity, entries)

    def save(self, user_id: str, history: HistoryBuffer) -> None:
        save_json(self.store, history_key(user_id), history.map(lambda e: e.to_dict()))

    def clear(self, user_id: Optional[str]) -> None:
        if user_id:
            self.store.remove(history_key(user_id))
