"""
Factory module for creating store cluster instances.
"""

import logging

# Keep client library logging quiet before importing the store systems
logging.getLogger('pymemcache').setLevel(logging.WARNING)

from systems.memcached import MemcachedCluster
from systems.memory import InMemoryCluster
from configuration import STORAGE_MEMCACHED, STORAGE_MEMORY

logger = logging.getLogger(__name__)


def create_store_cluster(config):
    """Create and return the store cluster for the configured backend.

    Args:
        config: Run configuration (storage, nodes, bucket, password)

    Returns:
        Store cluster instance (MemcachedCluster or InMemoryCluster)

    Raises:
        ValueError: If the storage type is not supported
    """
    storage_type = config.storage.lower()

    if storage_type == STORAGE_MEMCACHED:
        return MemcachedCluster(config.nodes, config.bucket, config.password)

    elif storage_type == STORAGE_MEMORY:
        return InMemoryCluster(config.bucket)

    else:
        raise ValueError(
            f"Unsupported storage type: {config.storage}. "
            f"Must be '{STORAGE_MEMCACHED}' or '{STORAGE_MEMORY}'."
        )
