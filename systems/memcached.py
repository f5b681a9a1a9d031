"""
Memcached-protocol store system built on pymemcache.
"""

import logging
from typing import Any, Optional, Sequence, Tuple

from pymemcache.client.hash import HashClient

from systems.base import StoreSystem, StoreCluster, StoreConnectionError
from configuration import (
    CONNECT_TIMEOUT_SECONDS,
    REQUEST_TIMEOUT_SECONDS,
    MAX_POOL_SIZE_PER_NODE,
    RETRY_ATTEMPTS,
    DEAD_NODE_TIMEOUT_SECONDS,
    CONNECTION_PROBE_KEY,
)

logger = logging.getLogger(__name__)


class MemcachedSystem(StoreSystem):
    """One pooled pymemcache connection set, safe to share between threads."""

    def __init__(self, name: str, nodes: Sequence[Tuple[str, int]], bucket: str):
        super().__init__(name)
        self.nodes = list(nodes)
        self.bucket = bucket

        # Pooled clients are thread-safe; replies are always awaited so
        # failures surface as exceptions in the calling workload.
        self.client = HashClient(
            self.nodes,
            connect_timeout=CONNECT_TIMEOUT_SECONDS,
            timeout=REQUEST_TIMEOUT_SECONDS,
            key_prefix=f"{bucket}:".encode(),
            use_pooling=True,
            max_pool_size=MAX_POOL_SIZE_PER_NODE,
            retry_attempts=RETRY_ATTEMPTS,
            dead_timeout=DEAD_NODE_TIMEOUT_SECONDS,
            ignore_exc=False,
            default_noreply=False,
        )

    def probe(self) -> None:
        """Round-trip one request to make sure the nodes answer.

        Raises:
            StoreConnectionError: If no node could be reached
        """
        try:
            self.client.get(CONNECTION_PROBE_KEY)
        except Exception as e:
            self.close()
            nodes = ",".join(f"{host}:{port}" for host, port in self.nodes)
            raise StoreConnectionError(f"Could not connect to {nodes}: {e}") from e

    def get(self, key: str) -> Optional[bytes]:
        return self.client.get(key)

    def set(self, key: str, value: bytes) -> bool:
        return bool(self.client.set(key, value, noreply=False))

    def add(self, key: str, value: bytes) -> bool:
        return bool(self.client.add(key, value, noreply=False))

    def gets(self, key: str) -> Tuple[Optional[bytes], Any]:
        return self.client.gets(key)

    def cas(self, key: str, value: bytes, token: Any) -> bool:
        if token is None:
            return False
        # True on STORED, False on EXISTS, None on NOT_FOUND
        return bool(self.client.cas(key, value, token, noreply=False))

    def _close(self) -> None:
        self.client.close()


class MemcachedCluster(StoreCluster):
    """Memcached nodes of one bucket."""

    def __init__(self, nodes: Sequence[Tuple[str, int]], bucket: str, password: str = ""):
        super().__init__(bucket)
        self.nodes = list(nodes)

        if password:
            logger.warning("Bucket password is ignored: the memcached text protocol has no authentication")

        logger.info(
            f"Initialized memcached cluster with {len(self.nodes)} nodes "
            f"(bucket={bucket}, pool size per node={MAX_POOL_SIZE_PER_NODE})"
        )

    def _connect(self, name: str) -> MemcachedSystem:
        connection = MemcachedSystem(name, self.nodes, self.bucket)
        connection.probe()
        return connection
