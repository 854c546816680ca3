from __future__ import annotations
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, Optional, TypeVar
from urllib.parse import quote

logger = logging.getLogger(__name__)

T = TypeVar("T")


def make_key(*parts: Any) -> str:
	"""Join key components with ':' after percent-encoding each one.

	Encoding keeps ("a:b", "c") and ("a", "b:c") from producing the same key.
	"""
	return ":".join(quote(str(p), safe="") for p in parts)


@dataclass
class CacheEntry:
	key: Hashable
	value: Any
	expires_at: float


class TTLCache:
	"""In-memory memoization with a per-entry time-to-live.

	Values are computed outside the lock, so two requests missing on the same
	key may both compute; the later store wins.
	"""

	def __init__(self, clock: Callable[[], float] = time.monotonic, max_entries: int = 1024) -> None:
		self._clock = clock
		self._max_entries = max_entries
		self._entries: Dict[Hashable, CacheEntry] = {}
		self._lock = threading.Lock()
		self.hits = 0
		self.misses = 0

	def get(self, key: Hashable) -> Optional[CacheEntry]:
		now = self._clock()
		with self._lock:
			entry = self._entries.get(key)
			if entry is None:
				return None
			if now >= entry.expires_at:
				del self._entries[key]
				return None
			return entry

	def set(self, key: Hashable, value: Any, ttl: float) -> CacheEntry:
		entry = CacheEntry(key=key, value=value, expires_at=self._clock() + ttl)
		with self._lock:
			self._entries[key] = entry
			if len(self._entries) > self._max_entries:
				self._evict_locked()
		return entry

	def get_or_compute(self, key: Hashable, ttl: float, compute_fn: Callable[[], T]) -> T:
		entry = self.get(key)
		if entry is not None:
			with self._lock:
				self.hits += 1
			logger.debug("Cache hit for %s", key)
			return entry.value
		with self._lock:
			self.misses += 1
		logger.debug("Cache miss for %s", key)
		value = compute_fn()
		self.set(key, value, ttl)
		return value

	def invalidate(self, key: Hashable) -> bool:
		with self._lock:
			return self._entries.pop(key, None) is not None

	def clear(self) -> None:
		with self._lock:
			self._entries.clear()

	def purge_expired(self) -> int:
		with self._lock:
			return self._purge_expired_locked()

	@property
	def stats(self) -> Dict[str, int]:
		with self._lock:
			size = len(self._entries)
		return {"hits": self.hits, "misses": self.misses, "size": size}

	def __len__(self) -> int:
		with self._lock:
			return len(self._entries)

	def _purge_expired_locked(self) -> int:
		now = self._clock()
		stale = [k for k, e in self._entries.items() if now >= e.expires_at]
		for k in stale:
			del self._entries[k]
		return len(stale)

	def _evict_locked(self) -> None:
		removed = self._purge_expired_locked()
		while len(self._entries) > self._max_entries:
			soonest = min(self._entries.values(), key=lambda e: e.expires_at)
			del self._entries[soonest.key]
			removed += 1
		if removed:
			logger.debug("Evicted %d cache entries", removed)
