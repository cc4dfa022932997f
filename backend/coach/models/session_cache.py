# coach/models/session_cache.py
import copy
import threading
from typing import Dict, List, Optional


class SessionCache:
    """
    In-memory cache of each user's serialized session list.
    Entries are copied in and out, so callers never share them.
    Entries are dropped when the user creates a session, logs in or logs out.
    """

    def __init__(self):
        self._entries: Dict[int, List[dict]] = {}
        self._lock = threading.Lock()

    def get(self, user_id: int) -> Optional[List[dict]]:
        with self._lock:
            entry = self._entries.get(user_id)
            return copy.deepcopy(entry) if entry is not None else None

    def put(self, user_id: int, sessions: List[dict]) -> None:
        with self._lock:
            self._entries[user_id] = copy.deepcopy(list(sessions))

    def invalidate(self, user_id: int) -> None:
        with self._lock:
            self._entries.pop(user_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, user_id: int) -> bool:
        with self._lock:
            return user_id in self._entries
