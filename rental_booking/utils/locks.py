"""Keyed mutual exclusion: one re-entrant lock per vehicle id."""
import threading
from contextlib import contextmanager


class KeyedLock:
    """
    Registry of re-entrant locks keyed by an identifier.
    Callers holding the lock for key A never block callers for key B.
    An entry lives only while someone holds or waits for it.
    """

    def __init__(self):
        # key -> [RLock, number of holders and waiters]
        self._locks: dict[str, list] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, key):
        key = str(key)
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = self._locks[key] = [threading.RLock(), 0]
            entry[1] += 1
        try:
            with entry[0]:
                yield entry[0]
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]
