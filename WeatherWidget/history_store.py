"""Bounded, newest-first lookup history persisted through a KeyValueStore."""
import logging
from typing import List
from storage import KeyValueStore
from weather_data import HistoryEntry

HISTORY_KEY = "weatherHistory"
HISTORY_LIMIT = 10


class HistoryStore:
    """
    Keeps the most recent successful lookups, newest first.

    The whole list is the persisted representation: every add() rewrites it
    under a single storage key.
    """

    def __init__(
        self,
        storage: KeyValueStore,
        key: str = HISTORY_KEY,
        limit: int = HISTORY_LIMIT
    ):
        """
        Initialize history store.

        Args:
            storage: Where the list is persisted
            key: Storage key holding the JSON array
            limit: Maximum number of entries kept
        """
        if limit < 1:
            raise ValueError(f"limit must be at least 1, got {limit}")
        self.storage = storage
        self.key = key
        self.limit = limit
        self._entries: List[HistoryEntry] = []

    @property
    def entries(self) -> List[HistoryEntry]:
        """Current entries, newest first (a copy)."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def load(self) -> List[HistoryEntry]:
        """
        Read the persisted history, replacing anything held in memory.

        Missing data gives an empty history. Records that can't be decoded
        are skipped with a warning so a damaged file never stops startup.

        Returns:
            The loaded entries, newest first
        """
        try:
            raw = self.storage.get_json(self.key)
        except (OSError, ValueError) as e:
            logging.warning(f"Could not read history, starting empty: {e}")
            raw = None

        entries: List[HistoryEntry] = []
        if raw is None:
            logging.info("No saved history found")
        elif not isinstance(raw, list):
            logging.warning(f"Ignoring saved history: expected a list, got {type(raw).__name__}")
        else:
            for index, record in enumerate(raw):
                try:
                    entries.append(HistoryEntry.from_dict(record))
                except (KeyError, TypeError, ValueError) as e:
                    logging.warning(f"Skipping unreadable history record #{index}: {e!r}")

        self._entries = entries[:self.limit]
        logging.info(f"Loaded {len(self._entries)} history entries")
        return self.entries

    def add(self, entry: HistoryEntry) -> List[HistoryEntry]:
        """
        Prepend an entry, drop the oldest beyond the limit and persist.

        Returns:
            The updated entries, newest first
        """
        self._entries = [entry] + self._entries[:self.limit - 1]
        self.storage.set_json(self.key, [e.to_dict() for e in self._entries])
        logging.debug(f"History now holds {len(self._entries)} entries (latest: {entry.city}, {entry.country})")
        return self.entries
