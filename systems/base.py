"""
Base classes for key-value store systems.

A StoreCluster stands for the whole target cluster and hands out one
StoreSystem connection per client handle. Both are context managers; closing
a cluster closes every connection it handed out that is still open.
"""

import logging
import threading
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class StoreConnectionError(Exception):
    """Raised when a connection to the store cannot be established."""


class StoreSystem:
    """Connection to a key-value store, shared by all worker threads of one client handle.

    Implementations must be safe for concurrent use; the workloads perform no
    locking around these calls.
    """

    def __init__(self, name: str):
        self.name = name
        self.closed = False

    def get(self, key: str) -> Optional[bytes]:
        """Read a value, None if the key is missing."""
        raise NotImplementedError

    def set(self, key: str, value: bytes) -> bool:
        """Store a value unconditionally."""
        raise NotImplementedError

    def add(self, key: str, value: bytes) -> bool:
        """Store a value only if the key does not exist yet.

        Returns:
            True if stored, False if the key already existed
        """
        raise NotImplementedError

    def gets(self, key: str) -> Tuple[Optional[bytes], Any]:
        """Read a value together with its version token.

        Returns:
            Tuple of (value, token); both None if the key is missing
        """
        raise NotImplementedError

    def cas(self, key: str, value: bytes, token: Any) -> bool:
        """Store a value only if the key still carries the given version token.

        Returns:
            True if stored, False on a version conflict or a missing key
        """
        raise NotImplementedError

    def close(self) -> None:
        """Release the connection. Safe to call more than once."""
        if self.closed:
            return
        self.closed = True
        self._close()
        logger.debug(f"Closed store connection {self.name}")

    def _close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, closed={self.closed})"


class StoreCluster:
    """Cluster-level resource handing out StoreSystem connections."""

    def __init__(self, bucket: str):
        self.bucket = bucket
        self.closed = False
        self.connections: List[StoreSystem] = []
        self._lock = threading.Lock()

    def connect(self, name: str) -> StoreSystem:
        """Open a new connection to the cluster.

        Raises:
            StoreConnectionError: If the cluster is closed or unreachable
        """
        with self._lock:
            if self.closed:
                raise StoreConnectionError(f"Cannot open connection {name}: cluster is closed")
        connection = self._connect(name)
        with self._lock:
            self.connections.append(connection)
        logger.info(f"Opened store connection {name} to bucket {self.bucket}")
        return connection

    def _connect(self, name: str) -> StoreSystem:
        raise NotImplementedError

    def open_connections(self) -> int:
        """Number of handed out connections that are still open."""
        with self._lock:
            return sum(1 for c in self.connections if not c.closed)

    def close(self) -> None:
        """Release the cluster and every connection still open. Safe to call more than once."""
        with self._lock:
            if self.closed:
                return
            self.closed = True
            connections = list(self.connections)

        for connection in connections:
            try:
                connection.close()
            except Exception as e:
                logger.warning(f"Failed to close store connection {connection.name}: {e}")
        self._close()
        logger.info(f"Closed store cluster for bucket {self.bucket}")

    def _close(self) -> None:
        pass

    def stats(self) -> Dict[str, Any]:
        """Basic bookkeeping about the cluster resource."""
        return {
            "bucket": self.bucket,
            "closed": self.closed,
            "connections": len(self.connections),
            "open_connections": self.open_connections(),
        }

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
