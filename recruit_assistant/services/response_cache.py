import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from recruit_assistant.config import config
from recruit_assistant.services.text_utils import normalize, tokens

logger = logging.getLogger(__name__)

MIN_TOKEN_LENGTH = 4
# a fuzzy hit needs this many long words in common, one shared word is not enough
MIN_SHARED_TOKENS = 2


def _significant(words: List[str]) -> List[str]:
    # short words ("how", "a", "the") would make unrelated questions look alike
    return [w for w in words if len(w) >= MIN_TOKEN_LENGTH]


def shared_words(query_words: List[str], cached_words: List[str]) -> List[str]:
    return [w for w in query_words if w in cached_words]


def word_overlap(query_words: List[str], cached_words: List[str]) -> float:
    """Share of query words found in the cached key, over the longer of the two."""
    longest = max(len(query_words), len(cached_words))
    if longest == 0:
        return 0.0
    return len(shared_words(query_words, cached_words)) / longest


@dataclass
class CacheEntry:
    normalized_key: str
    answer_text: str
    conversation_handle: str
    scroll_to_form: bool = False
    created_at: float = field(default_factory=time.time)


class ResponseCache:
    """Bounded, TTL'd answer cache with exact and word-overlap lookup.

    Entries are kept in insertion order. Reads never reorder them, so eviction
    always drops the oldest insert (not the least recently used). Expired
    entries are skipped on lookup and only disappear through eviction or
    replacement.
    """

    def __init__(self, max_entries: int = None, ttl_seconds: float = None,
                 similarity_threshold: float = None,
                 clock: Callable[[], float] = time.time):
        self.max_entries = max_entries if max_entries is not None else config.CACHE_MAX_ENTRIES
        self.ttl_seconds = ttl_seconds if ttl_seconds is not None else config.CACHE_TTL_SECONDS
        self.similarity_threshold = (
            similarity_threshold if similarity_threshold is not None
            else config.CACHE_SIMILARITY_THRESHOLD
        )
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, question: str) -> bool:
        return normalize(question) in self._entries

    def new_entry(self, question: str, answer_text: str, conversation_handle: str,
                  scroll_to_form: bool = False) -> CacheEntry:
        return CacheEntry(
            normalized_key=normalize(question),
            answer_text=answer_text,
            conversation_handle=conversation_handle,
            scroll_to_form=scroll_to_form,
            created_at=self._clock(),
        )

    def _is_expired(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.created_at >= self.ttl_seconds

    def lookup_exact(self, question: str) -> Optional[CacheEntry]:
        entry = self._entries.get(normalize(question))
        if entry is None or self._is_expired(entry, self._clock()):
            return None
        return entry

    def lookup_similar(self, question: str) -> Optional[CacheEntry]:
        """Return the first live entry whose word overlap reaches the threshold.

        Candidates are scanned in insertion order and the first qualifying one
        wins, even if a later entry would score higher. A candidate sharing
        fewer than ``MIN_SHARED_TOKENS`` long words never qualifies.
        """
        words = _significant(tokens(question))
        if len(words) < MIN_SHARED_TOKENS:
            return None
        now = self._clock()
        for cached_key, entry in list(self._entries.items()):
            if self._is_expired(entry, now):
                continue
            cached_words = _significant(cached_key.split(" "))
            if len(shared_words(words, cached_words)) < MIN_SHARED_TOKENS:
                continue
            similarity = word_overlap(words, cached_words)
            if similarity >= self.similarity_threshold:
                logger.info("Cache hit with %d%% similarity", round(similarity * 100))
                return entry
        return None

    def lookup(self, question: str) -> Optional[CacheEntry]:
        return self.lookup_exact(question) or self.lookup_similar(question)

    def insert(self, entry: CacheEntry) -> None:
        with self._lock:
            # Re-inserting a key moves it to the back, like a fresh insert
            self._entries.pop(entry.normalized_key, None)
            self._entries[entry.normalized_key] = entry
            if len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("Evicted cache entry: %s", evicted)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def stats(self) -> Dict[str, float]:
        return {
            "size": len(self._entries),
            "max_entries": self.max_entries,
            "ttl_seconds": self.ttl_seconds,
            "similarity_threshold": self.similarity_threshold,
        }
