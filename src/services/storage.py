"""String key/value persistence.

Services never touch the filesystem directly; they receive a store. Values
are strings (JSON text, like browser local storage), and the helpers below
decode them leniently so a missing or damaged key reads as empty.
"""

import json
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from loguru import logger


class KeyValueStore(ABC):
    """Minimal persistent string map."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        pass


class MemoryStore(KeyValueStore):
    """In-process store, used by tests and by sessions without a data dir."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """Store backed by a single JSON object file.

    The file is re-read on every access and rewritten on every change, so two
    shells sharing a data directory see each other's writes.
    """

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, 'r') as f:
                data = json.load(f)
        except (json.JSONDecodeError, IOError) as e:
            logger.warning("Store file {} is unreadable, starting empty: {}", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Store file {} does not hold an object, starting empty", self.path)
            return {}
        return data

    def _write(self, data: Dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(self.path, 'w') as f:
            json.dump(data, f, indent=2)

    def get(self, key: str) -> Optional[str]:
        value = self._read().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if key in data:
            del data[key]
            self._write(data)


def load_json(store: KeyValueStore, key: str, default: Any = None) -> Any:
    """Decode the JSON stored under ``key``, or return ``default``."""
    raw = store.get(key)
    if not raw:
        return default
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Discarding corrupt value stored under '{}'", key)
        return default


def load_json_list(store: KeyValueStore, key: str) -> List[Any]:
    """Decode a JSON array stored under ``key``; anything else reads as []."""
    value = load_json(store, key, [])
    if not isinstance(value, list):
        logger.warning("Expected a list under '{}', got {}", key, type(value).__name__)
        return []
    return value


def save_json(store: KeyValueStore, key: str, value: Any) -> None:
    store.set(key, json.dumps(value, default=str))
