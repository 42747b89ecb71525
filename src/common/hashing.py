"""Hashing utilities."""

import hashlib
import struct

FNV_OFFSET_BASIS = 2166136261


def stable_hash(value: str) -> int:
    """Return the 32-bit FNV-1a hash of a string.

    The hash runs over UTF-16 code units so that seeds produce the same values
    the editions were originally planned with. Seed strings follow the
    ``day|years_forward|section|bucket|topic_slug`` convention.
    """
    data = str(value or "").encode("utf-16-le")
    units = struct.unpack(f"<{len(data) // 2}H", data)
    h = FNV_OFFSET_BASIS
    for unit in units:
        h ^= unit
        h = (h + (h << 1) + (h << 4) + (h << 7) + (h << 8) + (h << 24)) & 0xFFFFFFFF
    return h


def pick_deterministic(items: list, seed: str):
    """Pick one item from a list by hashing the seed."""
    if not items:
        return None
    return items[stable_hash(seed) % len(items)]


def fingerprint_digest(value: str, length: int = 10) -> str:
    """Short sha256 hex digest of a curation fingerprint."""
    return hashlib.sha256(str(value or "").encode("utf-8")).hexdigest()[:length]
