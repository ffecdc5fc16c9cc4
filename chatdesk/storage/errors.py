"""Record store exceptions."""

from pathlib import Path


class RecordStoreError(Exception):
    """Base exception for record store failures."""

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


class CorruptCollectionError(RecordStoreError):
    """A collection file could not be read or parsed (strict mode only)."""


class CollectionWriteError(RecordStoreError):
    """A collection file could not be written."""
