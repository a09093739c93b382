"""
Snapshot Module

Checkpoints a KVStore's entries to a binary stream or file, and merges
them back in. Encoding happens under the store's read lock; merging
happens under its write lock, and only after the whole input decoded.
"""

import logging
from typing import TYPE_CHECKING, BinaryIO, Optional

from ..config.settings import settings
from ..errors import SerializationError
from .codec import decode_entries, encode_entries

if TYPE_CHECKING:
    from ..cache.store import KVStore

logger = logging.getLogger(__name__)


class Snapshotter:
    """
    Saves and restores the entries of one store.

    Usage:
        snap = Snapshotter(store)
        snap.save_to_file("cache.snap")
        ...
        snap.load_from_file("cache.snap")

    Restore policy: a loaded entry only overwrites a key that already
    holds an unexpired entry in the store. Keys missing from the store
    (or expired there) are not inserted.
    """

    def __init__(self, store: "KVStore"):
        self.store = store

    def dumps(self) -> bytes:
        """
        Encode every entry in the store, expired or not.

        Raises:
            SerializationError: If any payload type is not supported
        """
        return self.store._encode_entries(encode_entries)

    def loads(self, data: bytes) -> int:
        """
        Decode snapshot bytes and merge them into the store.

        Returns:
            Number of store entries overwritten

        Raises:
            DeserializationError: If data is not a valid snapshot
        """
        entries = decode_entries(data)
        merged = self.store._merge_unexpired(entries)
        logger.debug(f"Loaded snapshot: {len(entries)} entries decoded, {merged} merged")
        return merged

    def save(self, stream: BinaryIO) -> None:
        """
        Write a snapshot to a binary stream.

        Raises:
            SerializationError: If encoding fails or the stream write fails
        """
        data = self.dumps()
        self._write(stream, data)
        logger.debug(f"Saved snapshot: {len(data)} bytes")

    def load(self, stream: BinaryIO) -> int:
        """
        Read a snapshot from a binary stream and merge it into the store.

        Returns:
            Number of store entries overwritten

        Raises:
            DeserializationError: If the stream content is not a valid snapshot
        """
        return self.loads(stream.read())

    def save_to_file(self, path: Optional[str] = None) -> None:
        """
        Write a snapshot to a file, creating or truncating it.

        The snapshot is fully encoded before the file is opened, so an
        encoding failure leaves an existing file untouched.

        Args:
            path: Target file (default settings.SNAPSHOT_PATH)

        Raises:
            SerializationError: If encoding or writing fails
            OSError: If the file cannot be created
        """
        path = path if path is not None else settings.SNAPSHOT_PATH
        data = self.dumps()
        with open(path, "wb") as fp:
            self._write(fp, data)
        logger.debug(f"Saved snapshot to {path}: {len(data)} bytes")

    def load_from_file(self, path: Optional[str] = None) -> int:
        """
        Merge a snapshot from a file.

        Args:
            path: Source file (default settings.SNAPSHOT_PATH)

        Returns:
            Number of store entries overwritten

        Raises:
            DeserializationError: If the file is not a valid snapshot
            OSError: If the file cannot be opened
        """
        path = path if path is not None else settings.SNAPSHOT_PATH
        with open(path, "rb") as fp:
            return self.load(fp)

    @staticmethod
    def _write(stream: BinaryIO, data: bytes) -> None:
        try:
            stream.write(data)
        except (OSError, ValueError, TypeError) as exc:
            raise SerializationError(f"failed to write snapshot: {exc}") from exc
