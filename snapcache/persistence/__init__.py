"""Persistence module for snapcache."""

from .codec import decode_entries, encode_entries
from .snapshot import Snapshotter

__all__ = ["Snapshotter", "encode_entries", "decode_entries"]
