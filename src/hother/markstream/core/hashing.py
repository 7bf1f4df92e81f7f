"""
Content hashing for fragment identity.

Both algorithms operate on the UTF-8 encoding of the input so results are
identical across processes, platforms and locales. Neither is cryptographic.
"""

from enum import Enum

_MASK32 = 0xFFFFFFFF

_C1 = 0xCC9E2D51
_C2 = 0x1B873593


class HashAlgorithm(str, Enum):
    """Hash algorithms available for stable keys."""

    MURMUR3 = "murmur3"
    DJB2 = "djb2"


def _rotl32(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (32 - shift))) & _MASK32


def _mix_k1(k1: int) -> int:
    k1 = (k1 * _C1) & _MASK32
    k1 = _rotl32(k1, 15)
    return (k1 * _C2) & _MASK32


def murmur3(content: str, seed: int = 0) -> str:
    """
    MurmurHash3 (x86, 32-bit) of a string.

    Args:
        content: Text to hash
        seed: Hash seed

    Returns:
        8 character lowercase hex digest
    """
    data = content.encode("utf-8")
    length = len(data)
    block_end = length - (length & 3)
    h1 = seed & _MASK32

    for i in range(0, block_end, 4):
        k1 = int.from_bytes(data[i : i + 4], "little")
        h1 ^= _mix_k1(k1)
        h1 = _rotl32(h1, 13)
        h1 = (h1 * 5 + 0xE6546B64) & _MASK32

    tail = data[block_end:]
    if tail:
        k1 = 0
        for offset, byte in enumerate(tail):
            k1 |= byte << (8 * offset)
        h1 ^= _mix_k1(k1)

    # fmix32
    h1 ^= length
    h1 ^= h1 >> 16
    h1 = (h1 * 0x85EBCA6B) & _MASK32
    h1 ^= h1 >> 13
    h1 = (h1 * 0xC2B2AE35) & _MASK32
    h1 ^= h1 >> 16

    return f"{h1:08x}"


def djb2(content: str) -> str:
    """djb2 (``h * 33 + byte``) of a string, as 8 character hex."""
    h = 5381
    for byte in content.encode("utf-8"):
        h = (h * 33 + byte) & _MASK32
    return f"{h:08x}"


def content_hash(content: str, algorithm: HashAlgorithm | str = HashAlgorithm.MURMUR3) -> str:
    """
    Hash content with the selected algorithm.

    Args:
        content: Text to hash
        algorithm: Algorithm name or enum member

    Returns:
        Fixed-width hex digest
    """
    if HashAlgorithm(algorithm) is HashAlgorithm.DJB2:
        return djb2(content)
    return murmur3(content)
