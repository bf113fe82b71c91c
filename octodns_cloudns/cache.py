#
#
#

import json
from hashlib import sha256
from threading import RLock
from time import monotonic
from typing import Any, Dict, Optional

from cachetools import TTLCache

# never part of a cache key
SECRET_PARAMS = ('auth-password',)


class ResponseCache(object):
    '''Memoizes parsed GET responses for a fixed time-to-live.

    Keys are ``prefix + sha256(method, endpoint, params)`` with secrets
    stripped from params, so rotating a password does not split the cache.
    '''

    def __init__(
        self, ttl: int, prefix: str = 'cloudns_', maxsize=1024, timer=monotonic
    ):
        self.ttl = ttl
        self.prefix = prefix
        self._entries = TTLCache(
            maxsize=max(maxsize, 1), ttl=ttl, timer=timer
        )
        self._lock = RLock()

    def fingerprint(
        self, method: str, endpoint: str, params: Dict[str, Any]
    ) -> str:
        public = {k: v for k, v in params.items() if k not in SECRET_PARAMS}
        canonical = json.dumps(
            public, sort_keys=True, separators=(',', ':'), default=str
        )
        digest = sha256(
            f'{method.upper()}{endpoint}{canonical}'.encode('utf-8')
        )
        return f'{self.prefix}{digest.hexdigest()}'

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: str, value: Any) -> None:
        if self.ttl <= 0:
            return
        with self._lock:
            self._entries[key] = value

    def invalidate(self, pattern: Optional[str] = None) -> int:
        '''Drop entries whose key starts with ``prefix + pattern``.

        ``pattern`` is matched against the hashed part of the key. Without
        a pattern every entry under this cache's prefix goes.
        Returns the number of dropped entries.
        '''
        start = f'{self.prefix}{pattern or ""}'
        with self._lock:
            doomed = [k for k in list(self._entries) if k.startswith(start)]
            for key in doomed:
                self._entries.pop(key, None)
        return len(doomed)

    def __len__(self):
        with self._lock:
            return len(self._entries)
