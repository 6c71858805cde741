from threading import RLock
from typing import Dict, List, Optional

from app.errors import DuplicateKeyError


class LocalMapStore:
    """
    Thread-safe in-process key -> serialized value map.
    Entries never expire; they live until the process exits.
    Insertion is write-once: storing an existing key raises DuplicateKeyError.
    """
    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = RLock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def contains(self, key: str) -> bool:
        with self._lock:
            return key in self._data

    def insert(self, key: str, value: str) -> None:
        with self._lock:
            if key in self._data:
                raise DuplicateKeyError(key)
            self._data[key] = value

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data)

    def __len__(self) -> int:
        with self._lock:
            return len(self._data)
