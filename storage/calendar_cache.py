"""In-memory cache for rendered calendar documents."""
import logging
from dataclasses import dataclass
from typing import Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class CacheEntry:
    """Rendered calendar text and the time it was stored."""
    content: str
    last_updated: float


class CalendarCache:
    """Cache of rendered calendars keyed by project id."""

    DEFAULT_TTL_SECONDS = 5 * 60

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS):
        """
        Initialize an empty cache.

        Args:
            ttl_seconds: Freshness window measured from the last store
        """
        self.ttl_seconds = ttl_seconds
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str, now: float) -> Optional[str]:
        """
        Return cached content if it is still fresh.

        Staleness is only checked here; expired entries stay in place until
        they are overwritten or invalidated.

        Args:
            key: Project id
            now: Current time in seconds since the epoch

        Returns:
            Cached content, or None on a miss or a stale entry
        """
        entry = self._entries.get(key)
        if entry is None:
            logger.debug(f"Cache miss for {key}")
            return None

        if now - entry.last_updated >= self.ttl_seconds:
            logger.debug(f"Cache entry for {key} is stale")
            return None

        logger.debug(f"Cache hit for {key}")
        return entry.content

    def put(self, key: str, value: str, now: float) -> None:
        """Store content for a key, replacing any previous entry."""
        self._entries[key] = CacheEntry(content=value, last_updated=now)

    def invalidate(self, key: str) -> bool:
        """
        Drop the entry for a key.

        Returns:
            True if an entry was removed, False if there was none
        """
        removed = self._entries.pop(key, None) is not None
        if removed:
            logger.info(f"Invalidated cached calendar for {key}")
        return removed

    def __contains__(self, key: str) -> bool:
        """Return True if an entry exists for the key, fresh or stale."""
        return key in self._entries

    def __len__(self) -> int:
        """Return the number of stored entries."""
        return len(self._entries)
