"""
Caching utilities for expensive dashboard aggregates
Uses Redis when configured, the local-memory cache otherwise
"""
from django.conf import settings
from django.core.cache import cache
import logging

from .cache_signals import stats_cache_key

logger = logging.getLogger(__name__)


def cached_stats(kind, society_id, compute, ttl=None):
    """
    Return the cached stats payload for ``kind`` in a society, computing and
    storing it on a miss. Signals in cache_signals drop the entry when any
    source record changes.
    """
    cache_key = stats_cache_key(kind, society_id)
    cached_data = cache.get(cache_key)
    if cached_data is not None:
        logger.debug(f"Cache HIT for {cache_key}")
        return cached_data

    logger.debug(f"Cache MISS for {cache_key}")
    data = compute()
    cache.set(cache_key, data, ttl or settings.SOCIETYHUB_STATS_CACHE_TTL)
    return data
