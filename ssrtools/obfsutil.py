"""Helpers shared by obfuscation plugins: header size and a fast PRNG."""

from __future__ import annotations

import time

__all__ = ["get_head_size", "XorShift128Plus"]

_MASK64 = 0xFFFFFFFFFFFFFFFF


def get_head_size(data: bytes | bytearray | None, def_size: int) -> int:
    """Return the size of the address header at the start of ``data``.

    The low three bits of the first byte give the address type: 1 (IPv4)
    makes 7 bytes, 4 (IPv6) makes 19 and 3 (domain) makes 4 plus the name
    length in the second byte. Anything else, or fewer than two bytes,
    gives ``def_size``.
    """
    if data is None or len(data) < 2:
        return def_size
    head_type = data[0] & 0x7
    if head_type == 1:
        return 7
    if head_type == 4:
        return 19
    if head_type == 3:
        return 4 + data[1]
    return def_size


class XorShift128Plus:
    """The xorshift128+ generator, seeded from a 32-bit value.

    Without a seed the current time is used.
    """

    def __init__(self, seed: int | None = None) -> None:
        if seed is None:
            seed = int(time.time())
        seed &= 0xFFFFFFFF
        self._s0 = seed | 0x100000000
        self._s1 = ((seed << 32) | 0x1) & _MASK64

    def next(self) -> int:
        """Return the next unsigned 64-bit value."""
        x = self._s0
        y = self._s1
        self._s0 = y
        x ^= (x << 23) & _MASK64
        x ^= x >> 17
        x ^= y ^ (y >> 26)
        self._s1 = x
        return (x + y) & _MASK64