"""
Document factories producing the payloads stored by the workloads.
"""

import logging
import threading

import numpy as np

logger = logging.getLogger(__name__)


class DocumentFactoryError(Exception):
    """Raised when a document factory cannot be constructed."""


class RandomDocumentFactory:
    """Returns a freshly generated random payload of a fixed size on every call."""

    def __init__(self, size: int):
        if size < 0:
            raise DocumentFactoryError(f"Document size must not be negative, got {size}")
        self.size = size
        # numpy generators are not thread-safe; one per worker thread
        self._local = threading.local()

    def get_document(self) -> bytes:
        rng = getattr(self._local, "rng", None)
        if rng is None:
            rng = self._local.rng = np.random.default_rng()
        return rng.bytes(self.size)

    def __repr__(self) -> str:
        return f"RandomDocumentFactory(size={self.size})"


class FileDocumentFactory:
    """Reads a file once and returns the same payload on every call.

    Lines are stripped and concatenated, so the payload is the file content
    without line breaks or surrounding whitespace.
    """

    def __init__(self, filename: str):
        self.filename = filename
        try:
            with open(filename, "rb") as f:
                self._document = b"".join(line.strip() for line in f)
        except OSError as e:
            raise DocumentFactoryError(f"Could not read document file {filename}: {e}") from e

        logger.info(f"Loaded document from {filename} ({len(self._document)} bytes)")

    def get_document(self) -> bytes:
        return self._document

    def __repr__(self) -> str:
        return f"FileDocumentFactory(filename={self.filename!r}, size={len(self._document)})"


def create_document_factory(config):
    """Select the document factory for a run.

    Args:
        config: Run configuration

    Returns:
        FileDocumentFactory if a filename is configured, else RandomDocumentFactory

    Raises:
        DocumentFactoryError: If the configured file cannot be read
    """
    if config.filename:
        return FileDocumentFactory(config.filename)
    return RandomDocumentFactory(config.doc_size)
