"""
Local persistence for saved searches and favorites.

A key-value string store plays the part of browser local storage. The
PersistenceAdapter keeps JSON lists under fixed keys in it.
"""

import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Sequence, Type, TypeVar, Union

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

SAVED_SEARCHES_KEY = "rental-finder-searches"
FAVORITES_KEY = "rental-finder-favorites"

T = TypeVar("T", bound=BaseModel)


class KeyValueStore(Protocol):
    """String store with local-storage semantics."""

    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """In-process store, used by tests and as a throwaway default."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileStore:
    """
    Store backed by a single JSON object on disk.

    Every write rewrites the file through a temporary sibling and an
    atomic rename, so a crash never leaves a half-written file behind.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        self.path = Path(path)

    def _read(self) -> Dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable store %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring store %s: top level is not an object", self.path)
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        os.replace(tmp, self.path)

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)


class PersistenceAdapter:
    """Loads and saves lists of models as JSON under string keys."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store

    def load(self, key: str, model: Type[T]) -> List[T]:
        """
        Load the list stored under ``key``.

        Never raises: an absent key or a value that does not parse as a
        list of ``model`` yields an empty list.
        """
        raw = self.store.get(key)
        if raw is None:
            return []
        try:
            return TypeAdapter(List[model]).validate_json(raw)
        except PydanticValidationError as e:
            logger.warning("Failed to load %s from storage: %s", key, e)
            return []

    def save(self, key: str, items: Sequence[BaseModel]) -> None:
        """
        Serialize ``items`` and store them under ``key``.

        The serialized text is parsed back before it is stored, so nothing
        that would fail to load is ever written.
        """
        serialized = json.dumps([item.model_dump(mode="json", by_alias=True) for item in items])
        model = type(items[0]) if items else None
        if model is not None:
            reloaded = TypeAdapter(List[model]).validate_json(serialized)
            if [r.model_dump() for r in reloaded] != [i.model_dump() for i in items]:
                raise ValueError(f"Refusing to store {key}: value does not round-trip")
        self.store.set(key, serialized)

    def remove(self, key: str) -> None:
        """Drop the list stored under ``key``."""
        self.store.remove(key)
