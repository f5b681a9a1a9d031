"""
Immutable run configuration shared read-only by all components.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from configuration import (
    DEFAULT_NODES,
    DEFAULT_BUCKET,
    DEFAULT_PASSWORD,
    DEFAULT_MEMCACHED_PORT,
    DEFAULT_NUM_THREADS,
    DEFAULT_NUM_CLIENTS,
    DEFAULT_NUM_DOCS,
    DEFAULT_RATIO,
    DEFAULT_SAMPLING,
    DEFAULT_WORKLOAD,
    DEFAULT_RAMP_SECONDS,
    DEFAULT_DOC_SIZE,
    DEFAULT_STORAGE,
    STORAGE_TYPES,
)

logger = logging.getLogger(__name__)

Node = Tuple[str, int]


def parse_nodes(nodes: str) -> Tuple[Node, ...]:
    """Convert a "host[:port],host[:port]" string into (host, port) pairs.

    Args:
        nodes: Comma separated node list

    Returns:
        Tuple of (host, port) pairs, in the given order

    Raises:
        ValueError: If the list is empty or a port is not a valid number
    """
    parsed = []
    for node in nodes.split(","):
        node = node.strip()
        if not node:
            continue
        host, sep, port = node.rpartition(":")
        if not sep:
            host, port = node, str(DEFAULT_MEMCACHED_PORT)
        if not host:
            raise ValueError(f"Missing host in node '{node}'")
        try:
            port_number = int(port)
        except ValueError:
            raise ValueError(f"Invalid port in node '{node}'") from None
        if not 0 < port_number < 65536:
            raise ValueError(f"Port out of range in node '{node}'")
        parsed.append((host, port_number))

    if not parsed:
        raise ValueError(f"Could not parse node list: '{nodes}'")
    return tuple(parsed)


@dataclass(frozen=True)
class RunConfig:
    """User-provided options with defaults applied."""

    nodes: Tuple[Node, ...] = parse_nodes(DEFAULT_NODES)
    bucket: str = DEFAULT_BUCKET
    password: str = DEFAULT_PASSWORD
    num_threads: int = DEFAULT_NUM_THREADS
    num_clients: int = DEFAULT_NUM_CLIENTS
    num_docs: int = DEFAULT_NUM_DOCS
    ratio: int = DEFAULT_RATIO
    sampling: int = DEFAULT_SAMPLING
    workload: str = DEFAULT_WORKLOAD
    ramp: int = DEFAULT_RAMP_SECONDS
    doc_size: int = DEFAULT_DOC_SIZE
    filename: Optional[str] = None
    storage: str = DEFAULT_STORAGE
    output_dir: Optional[str] = None
    plots_dir: Optional[str] = None

    def __post_init__(self):
        if self.num_threads < 1:
            raise ValueError(f"num_threads must be at least 1, got {self.num_threads}")
        if self.num_clients < 1:
            raise ValueError(f"num_clients must be at least 1, got {self.num_clients}")
        if self.num_docs < 0:
            raise ValueError(f"num_docs must not be negative, got {self.num_docs}")
        if self.ratio < 0:
            raise ValueError(f"ratio must not be negative, got {self.ratio}")
        if not 1 <= self.sampling <= 100:
            raise ValueError(f"sampling must be between 1 and 100, got {self.sampling}")
        if self.ramp < 0:
            raise ValueError(f"ramp must not be negative, got {self.ramp}")
        if self.doc_size < 0:
            raise ValueError(f"doc_size must not be negative, got {self.doc_size}")
        if self.storage not in STORAGE_TYPES:
            raise ValueError(
                f"Unsupported storage type: {self.storage}. Must be one of {', '.join(STORAGE_TYPES)}."
            )

    @classmethod
    def from_args(cls, args) -> "RunConfig":
        """Build the configuration from parsed command line arguments."""
        return cls(
            nodes=parse_nodes(args.nodes),
            bucket=args.bucket,
            password=args.password,
            num_threads=args.num_threads,
            num_clients=args.num_clients,
            num_docs=args.num_docs,
            ratio=args.ratio,
            sampling=args.sampling,
            workload=args.workload,
            ramp=args.ramp,
            doc_size=args.doc_size,
            filename=args.filename,
            storage=args.storage,
            output_dir=args.output_dir,
            plots_dir=args.plots_dir,
        )

    def __str__(self) -> str:
        nodes = ",".join(f"{host}:{port}" for host, port in self.nodes)
        return (
            f"RunConfig(nodes={nodes}, bucket={self.bucket}, storage={self.storage}, "
            f"num_threads={self.num_threads}, num_clients={self.num_clients}, "
            f"num_docs={self.num_docs}, ratio={self.ratio}, sampling={self.sampling}%, "
            f"workload={self.workload}, ramp={self.ramp}s, "
            f"document={self.filename or f'{self.doc_size} random bytes'})"
        )
