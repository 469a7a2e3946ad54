"""Key-value storage abstraction - allows swapping the file store with an in-memory one."""
import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class KeyValueStore(ABC):
    """Abstract key-value store holding JSON-encodable values."""

    @abstractmethod
    def get_json(self, key: str) -> Optional[Any]:
        """
        Get a value by key.

        Args:
            key: Key to retrieve

        Returns:
            The decoded value, or None if the key is not set
        """
        pass

    @abstractmethod
    def set_json(self, key: str, value: Any) -> None:
        """
        Store a value under key, replacing any previous value.

        Args:
            key: Key to set
            value: Any JSON-encodable value
        """
        pass


class MemoryStore(KeyValueStore):
    """In-memory store for tests and throwaway sessions."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self.set_json(key, value)

    def get_json(self, key: str) -> Optional[Any]:
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def set_json(self, key: str, value: Any) -> None:
        # Keep the encoded form so callers can't mutate stored values in place
        self._data[key] = json.dumps(value)


class JsonFileStore(KeyValueStore):
    """
    Store backed by a single JSON document on disk.

    The file holds one object mapping keys to values. Every write rewrites
    the whole file through a temporary file in the same directory, so a
    crash mid-write leaves the previous contents intact.
    """

    def __init__(self, path: str):
        """
        Args:
            path: Location of the JSON file (created on first write)
        """
        self.path = os.path.abspath(os.path.expanduser(path))

    def _read_all(self) -> Dict[str, Any]:
        if not os.path.exists(self.path):
            logging.debug(f"Storage file {self.path} does not exist yet")
            return {}
        with open(self.path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
        if not isinstance(data, dict):
            raise ValueError(f"{self.path} does not contain a JSON object")
        return data

    def get_json(self, key: str) -> Optional[Any]:
        return self._read_all().get(key)

    def set_json(self, key: str, value: Any) -> None:
        try:
            data = self._read_all()
        except ValueError as e:
            logging.warning(f"Overwriting unreadable storage file {self.path}: {e}")
            data = {}
        data[key] = value

        directory = os.path.dirname(self.path)
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".tmp-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise
        logging.debug(f"Wrote key {key!r} to {self.path}")
