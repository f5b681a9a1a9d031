"""
Configuration constants for the RoadRunner key-value load tester.

This module contains all configuration parameters including:
- Store connection defaults and credentials
- Workload defaults used by the command line
- Worker pool and connection timeouts
- Reporting percentiles and unit conversion factors
"""

import os
from typing import Tuple

# =============================================================================
# STORE CONFIGURATION
# =============================================================================

# Comma separated "host[:port]" list of store nodes
DEFAULT_NODES: str = os.getenv("ROADRUNNER_NODES", "127.0.0.1")
DEFAULT_BUCKET: str = os.getenv("ROADRUNNER_BUCKET", "default")
DEFAULT_PASSWORD: str = os.getenv("ROADRUNNER_PASSWORD", "")

# Port used when a node is given without one
DEFAULT_MEMCACHED_PORT: int = 11211

# Supported storage backends
STORAGE_MEMCACHED: str = "memcached"
STORAGE_MEMORY: str = "memory"
STORAGE_TYPES: Tuple[str, ...] = (STORAGE_MEMCACHED, STORAGE_MEMORY)
DEFAULT_STORAGE: str = STORAGE_MEMCACHED

# Key read once per connection to verify the nodes are reachable
CONNECTION_PROBE_KEY: str = "roadrunner-probe"

# =============================================================================
# WORKLOAD DEFAULTS
# =============================================================================

DEFAULT_NUM_THREADS: int = 1
DEFAULT_NUM_CLIENTS: int = 1
DEFAULT_NUM_DOCS: int = 1000
DEFAULT_RATIO: int = 50
DEFAULT_SAMPLING: int = 100  # Percent of iterations wrapped with latency timing
DEFAULT_WORKLOAD: str = "getset"
DEFAULT_RAMP_SECONDS: int = 0
DEFAULT_DOC_SIZE: int = 1000  # Bytes

# =============================================================================
# TIMEOUTS
# =============================================================================

CONNECT_TIMEOUT_SECONDS: float = 5.0
REQUEST_TIMEOUT_SECONDS: float = 10.0

# Bounded wait for a client handle's pool to drain after shutdown
POOL_SHUTDOWN_TIMEOUT_SECONDS: float = 60.0

# pymemcache pooled client settings
MAX_POOL_SIZE_PER_NODE: int = 64
RETRY_ATTEMPTS: int = 2
DEAD_NODE_TIMEOUT_SECONDS: int = 60

# =============================================================================
# REPORTING
# =============================================================================

REPORT_PERCENTILES: Tuple[int, ...] = (50, 75, 95, 99)

# =============================================================================
# UNIT CONVERSIONS
# =============================================================================

MICROSECONDS_PER_SECOND: int = 1_000_000
MILLISECONDS_PER_SECOND: int = 1000

# =============================================================================
# CLI DEFAULTS
# =============================================================================

DEFAULT_LOG_LEVEL: str = "INFO"
DEFAULT_OUTPUT_PREFIX: str = "roadrunner"
