from __future__ import annotations
import json
import hashlib
import time
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)

CACHE_ROOT = Path('.cache/api/yotpo')


@dataclass
class CacheEntry:
    key: str
    payload: str
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


def _hash_key(key: str) -> str:
    return hashlib.sha256(key.encode('utf-8')).hexdigest()


class MemoryCache:
    """In-process cache store; entries die with the process."""

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._entries: Dict[str, CacheEntry] = {}

    def get(self, key: str) -> Optional[CacheEntry]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.is_expired(self.clock()):
            del self._entries[key]
            return None
        return entry

    def set(self, key: str, payload: str, expires_at: float) -> None:
        self._entries[key] = CacheEntry(key, payload, expires_at)

    def delete(self, key: str) -> None:
        self._entries.pop(key, None)

    def clear(self) -> None:
        self._entries.clear()


class FileCache:
    """Persistent cache store: one JSON file per key under ``root``."""

    def __init__(self, root: Path | str = CACHE_ROOT, clock: Callable[[], float] = time.time):
        self.root = Path(root)
        self.clock = clock

    def path(self, key: str) -> Path:
        self.root.mkdir(parents=True, exist_ok=True)
        return self.root / f"{_hash_key(key)}.json"

    def get(self, key: str) -> Optional[CacheEntry]:
        p = self.path(key)
        if not p.exists():
            return None
        try:
            raw = json.loads(p.read_text(encoding='utf-8'))
            entry = CacheEntry(raw['key'], raw['payload'], float(raw['expires_at']))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.debug('Ignoring unreadable cache file %s: %s', p, e)
            return None
        if entry.key != key or entry.is_expired(self.clock()):
            return None
        return entry

    def set(self, key: str, payload: str, expires_at: float) -> None:
        p = self.path(key)
        record = {'key': key, 'payload': payload, 'expires_at': expires_at}
        p.write_text(json.dumps(record, ensure_ascii=False, indent=2), encoding='utf-8')

    def delete(self, key: str) -> None:
        p = self.path(key)
        if p.exists():
            p.unlink()

    def clear(self) -> None:
        if not self.root.exists():
            return
        for p in self.root.glob('*.json'):
            p.unlink()
