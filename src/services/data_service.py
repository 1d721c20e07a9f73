"""Saved per-user entries, grouped by type under ``<userId>_<type>``."""

from dataclasses import asdict, dataclass
from typing import Any, List

from loguru import logger

from services.activity_service import now_ms
from services.storage import KeyValueStore, load_json_list, save_json


@dataclass
class StorageItem:
    user_id: str
    type: str
    data: Any
    timestamp: int


def storage_key(user_id: str, data_type: str) -> str:
    return f"{user_id}_{data_type}"


class DataService:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def save_data(self, user_id: str, data_type: str, data: Any) -> StorageItem:
        key = storage_key(user_id, data_type)
        items = load_json_list(self.store, key)
        item = StorageItem(user_id, data_type, data, now_ms())
        items.append(asdict(item))
        save_json(self.store, key, items)
        return item

    def get_data(self, user_id: str, data_type: str) -> List[StorageItem]:
        items = []
        for raw in load_json_list(self.store, storage_key(user_id, data_type)):
            try:
                items.append(StorageItem(**raw))
            except TypeError:
                logger.warning("Skipping malformed saved item: {}", raw)
        return items

    def clear_data(self, user_id: str, data_type: str) -> None:
        self.store.remove(storage_key(user_id, data_type))
