"""Random string and byte generators used for test and mock payloads."""

from __future__ import annotations

import random
import time

RANDOM_MIN = 1500
RANDOM_MAX = 2500

LETTER_BYTES = (
    "0123456789!@#$%^&*()_+abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
)
_LETTER_IDX_BITS = 6
_LETTER_IDX_MASK = (1 << _LETTER_IDX_BITS) - 1
_LETTER_IDX_MAX = 63 // _LETTER_IDX_BITS

_mock_source = random.Random(time.time_ns())


def random_string_from_source(size: int, src: random.Random) -> str:
    """Build a random string of ``size`` characters from 63-bit draws of ``src``."""
    chars: list[str] = []
    cache, remain = src.getrandbits(63), _LETTER_IDX_MAX
    while len(chars) < size:
        if remain == 0:
            cache, remain = src.getrandbits(63), _LETTER_IDX_MAX
        idx = cache & _LETTER_IDX_MASK
        if idx < len(LETTER_BYTES):
            chars.append(LETTER_BYTES[idx])
        cache >>= _LETTER_IDX_BITS
        remain -= 1
    # Characters are placed from the end of the string towards the start.
    return "".join(reversed(chars))


def random_string(size: int) -> str:
    """Build a random string from a fresh source seeded with the current time."""
    return random_string_from_source(size, random.Random(time.time_ns()))


def random_bytes(size: int) -> bytes:
    """Return a random string of ``size`` characters as ASCII bytes."""
    return random_string_from_source(size, _mock_source).encode("ascii")


def repeated_bytes(size: int, repeat: int) -> bytes:
    """Return ``size`` bytes counting up from zero, zero padded over the last run.

    ``repeat`` must be at least 10.
    """
    if repeat < 10:
        raise ValueError("repeat must be at least 10")
    filled = min(size, max(0, size - repeat + 2))
    return bytes(i & 0xFF for i in range(filled)) + bytes(max(size, 0) - filled)


def repeated_random_string(size: int, repeat: int) -> str:
    """Return ``size``-bounded runs of random characters, each repeated ``repeat`` times.

    ``repeat`` must be at least 10.
    """
    if repeat < 10:
        raise ValueError("repeat must be at least 10")
    parts: list[str] = []
    for i in range(size):
        count = min(repeat, size - i)
        parts.append(random_string(1) * count)
        if count < repeat:
            break
    return "".join(parts)