"""
Time-bounded memoization of provider results.

Each back-end operation gets its own TTLCache namespace. Values live in a
Django cache backend (process-local LocMemCache by default) together with the
time they were stored; an entry older than the TTL counts as a miss.
Failed computations are never stored, so the next identical call retries.

There is no in-flight deduplication: concurrent misses on the same key may
compute the value more than once, the last successful write wins.
"""

import hashlib
import logging
from datetime import timedelta

from django.core.cache import caches
from django.utils import timezone

from sources.service.config import get_cache_alias, get_cache_ttl

logger = logging.getLogger(__name__)


class TTLCache:
    """Memoizer that caches only successful computations for a fixed duration"""

    def __init__(self, namespace, ttl=None, alias=None):
        """
        Args:
            namespace: Key prefix separating this cache from other operations
            ttl: Time-to-live in seconds (default from settings)
            alias: Django cache alias (default from settings)
        """
        self.namespace = namespace
        self.ttl = get_cache_ttl() if ttl is None else ttl
        self.alias = alias or get_cache_alias()

    @property
    def backend(self):
        return caches[self.alias]

    def make_key(self, key):
        """Build the backend key; hashed so long URLs stay valid cache keys."""
        if isinstance(key, (tuple, list)):
            key = '|'.join(str(part) for part in key)
        digest = hashlib.sha256(str(key).encode('utf-8')).hexdigest()
        return f'relaycast:{self.namespace}:{digest}'

    def get_or_compute(self, key, compute):
        """
        Return the cached value for key, computing and storing it on a miss.

        Args:
            key: Hashable key (string or tuple of parts) within this namespace
            compute: Callable without arguments producing the value

        Returns:
            The cached or freshly computed value

        Raises:
            Whatever compute raises; nothing is cached in that case.
        """
        cache_key = self.make_key(key)
        entry = self.backend.get(cache_key)
        now = timezone.now()
        if entry is not None:
            stored_at, value = entry
            if now - stored_at < timedelta(seconds=self.ttl):
                logger.debug('Cache hit for %s %r', self.namespace, key)
                return value
            logger.debug('Cache entry expired for %s %r', self.namespace, key)

        logger.debug('Cache miss for %s %r', self.namespace, key)
        value = compute()
        # The backend timeout only bounds memory; expiry is decided above.
        self.backend.set(cache_key, (timezone.now(), value), timeout=self.ttl)
        return value

