"""
In-process store system for smoke runs and tests.
"""

import itertools
import logging
import threading
from typing import Any, Dict, Optional, Tuple

from systems.base import StoreSystem, StoreCluster

logger = logging.getLogger(__name__)


class InMemoryBackend:
    """Thread-safe key-value map where every write bumps a version token."""

    def __init__(self):
        self.data: Dict[str, Tuple[bytes, int]] = {}
        self._versions = itertools.count(1)
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[bytes]:
        with self._lock:
            entry = self.data.get(key)
        return entry[0] if entry else None

    def set(self, key: str, value: bytes) -> bool:
        with self._lock:
            self.data[key] = (value, next(self._versions))
        return True

    def add(self, key: str, value: bytes) -> bool:
        with self._lock:
            if key in self.data:
                return False
            self.data[key] = (value, next(self._versions))
        return True

    def gets(self, key: str) -> Tuple[Optional[bytes], Optional[int]]:
        with self._lock:
            entry = self.data.get(key)
        return entry if entry else (None, None)

    def cas(self, key: str, value: bytes, token: Any) -> bool:
        with self._lock:
            entry = self.data.get(key)
            if entry is None or entry[1] != token:
                return False
            self.data[key] = (value, next(self._versions))
        return True

    def __len__(self) -> int:
        with self._lock:
            return len(self.data)


class InMemorySystem(StoreSystem):
    """Connection to an InMemoryBackend; keys are namespaced by bucket."""

    def __init__(self, name: str, backend: InMemoryBackend, bucket: str):
        super().__init__(name)
        self.backend = backend
        self.prefix = f"{bucket}:"

    def get(self, key: str) -> Optional[bytes]:
        return self.backend.get(self.prefix + key)

    def set(self, key: str, value: bytes) -> bool:
        return self.backend.set(self.prefix + key, value)

    def add(self, key: str, value: bytes) -> bool:
        return self.backend.add(self.prefix + key, value)

    def gets(self, key: str) -> Tuple[Optional[bytes], Any]:
        return self.backend.gets(self.prefix + key)

    def cas(self, key: str, value: bytes, token: Any) -> bool:
        return self.backend.cas(self.prefix + key, value, token)


class InMemoryCluster(StoreCluster):
    """All connections of the cluster share one backend."""

    def __init__(self, bucket: str, backend: Optional[InMemoryBackend] = None):
        super().__init__(bucket)
        self.backend = backend if backend is not None else InMemoryBackend()
        logger.info(f"Initialized in-memory store cluster (bucket={bucket})")

    def _connect(self, name: str) -> InMemorySystem:
        return InMemorySystem(name, self.backend, self.bucket)
