import threading
from collections import OrderedDict
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class CacheEntry:
    etag: str
    body: bytes


class LRUCache:
    """Response cache keyed by full URL, bounded by entry count.

    Every entry counts as one unit toward ``max_entries`` no matter how large
    its body is. A capacity of zero or less disables caching entirely.
    """

    def __init__(self, max_entries: int):
        self.max_entries = max_entries
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    @property
    def enabled(self) -> bool:
        return self.max_entries > 0

    def get(self, url: str) -> Optional[CacheEntry]:
        with self._lock:
            entry = self._entries.get(url)
            if entry is not None:
                self._entries.move_to_end(url)
            return entry

    def set(self, url: str, entry: CacheEntry) -> Optional[str]:
        """Store ``entry`` for ``url``; return the evicted URL, if any."""
        if not self.enabled:
            return None
        with self._lock:
            self._entries[url] = entry
            self._entries.move_to_end(url)
            if len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                return evicted
        return None

    def delete(self, url: str) -> None:
        with self._lock:
            self._entries.pop(url, None)

    def __contains__(self, url: str) -> bool:
        with self._lock:
            return url in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
