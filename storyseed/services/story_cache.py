"""Process-lifetime cache for generated stories.

Entries are never evicted or refreshed. Anything exposing ``get`` and ``put``
can stand in for :class:`InMemoryStoryCache` when a bounded or shared store
is needed.
"""

from __future__ import annotations

import hashlib
import json
from typing import Dict, Optional, Protocol


class StoryCache(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def put(self, key: str, text: str) -> None:
        ...


class InMemoryStoryCache:
    def __init__(self) -> None:
        self._entries: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._entries.get(key)

    def put(self, key: str, text: str) -> None:
        self._entries[key] = text

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def story_cache_key(seed: str, tone: str, length: str) -> str:
    blob = json.dumps(
        {"seed": seed, "tone": tone, "length": length},
        sort_keys=True,
        ensure_ascii=False,
    )
    return hashlib.sha256(blob.encode("utf-8")).hexdigest()
