"""
Cache invalidation signals
Automatically invalidate dashboard stats when data changes
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
from django.apps import apps
from django.core.cache import cache
import logging
import threading
from contextlib import contextmanager

logger = logging.getLogger(__name__)

STATS_KINDS = ['vendor_stats', 'billing_stats', 'guard_stats', 'admin_dashboard']

# Models whose changes invalidate each stats kind
INVALIDATION_MAP = {
    'Vendor': ['vendor_stats', 'admin_dashboard'],
    'VendorPayment': ['vendor_stats'],
    'Invoice': ['billing_stats', 'admin_dashboard'],
    'Visitor': ['guard_stats', 'admin_dashboard'],
    'Unit': ['admin_dashboard'],
    'User': ['admin_dashboard'],
    'AmenityBooking': ['admin_dashboard'],
    'Event': ['admin_dashboard'],
    'Society': STATS_KINDS,
    'Setting': ['vendor_stats'],
}

# Platform wide records; a change reaches every society's cached stats
GLOBAL_MODELS = {'Setting'}

_thread_locals = threading.local()


@contextmanager
def suspend_cache_signals():
    """
    Context manager to temporarily suspend cache invalidation signals.
    Useful for bulk operations to prevent excessive cache clearing.
    Remember to manually invalidate cache after the block!
    """
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = False


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


def stats_cache_key(kind, society_id):
    return f"{kind}:{society_id or 'all'}"


def invalidate_stats_cache(society_id, kinds=None):
    """Drop cached stats of one society (and the platform-wide entry)"""
    kinds = kinds or STATS_KINDS
    keys = []
    for kind in kinds:
        keys.append(stats_cache_key(kind, society_id))
        keys.append(stats_cache_key(kind, None))
    try:
        cache.delete_many(keys)
        logger.info(f"Invalidated stats cache for society {society_id}: {', '.join(kinds)}")
    except Exception as e:
        logger.warning(f"Could not invalidate stats cache for society {society_id}: {str(e)}")


def invalidate_all_stats_cache(kinds=None):
    """Drop cached stats of every society"""
    kinds = kinds or STATS_KINDS
    Society = apps.get_model('society', 'Society')
    keys = [stats_cache_key(kind, None) for kind in kinds]
    for society_id in Society.objects.values_list('pk', flat=True):
        keys.extend(stats_cache_key(kind, society_id) for kind in kinds)
    try:
        cache.delete_many(keys)
        logger.info(f"Invalidated stats cache for all societies: {', '.join(kinds)}")
    except Exception as e:
        logger.warning(f"Could not invalidate stats cache for all societies: {str(e)}")


def _society_id_of(instance):
    if type(instance).__name__ == 'Society':
        return instance.pk
    if hasattr(instance, 'society_id'):
        return instance.society_id
    # VendorPayment and AmenityBooking reach the society through their parent
    for parent in ('vendor', 'amenity'):
        if hasattr(instance, f'{parent}_id'):
            related = getattr(instance, parent, None)
            return getattr(related, 'society_id', None)
    return None


@receiver([post_save, post_delete])
def invalidate_stats_on_change(sender, instance, **kwargs):
    """Invalidate dashboard stats when their source records change"""
    if is_suspended():
        return

    kinds = INVALIDATION_MAP.get(sender.__name__)
    if not kinds:
        return
    try:
        if sender.__name__ in GLOBAL_MODELS:
            invalidate_all_stats_cache(kinds)
        else:
            invalidate_stats_cache(_society_id_of(instance), kinds)
    except Exception as e:
        logger.warning(f"Error in invalidate_stats_on_change signal: {e}")
