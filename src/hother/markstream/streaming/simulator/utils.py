"""Chunking helpers for simulated streams."""

import random

from .config import StreamConfig


def get_random_chunk_size(config: StreamConfig, rng: random.Random | None = None) -> int:
    rng = rng or random.Random()
    return rng.randint(config.min_chunk_size, config.max_chunk_size)


def split_by_size(text: str, size: int) -> list[str]:
    """Split ``text`` into chunks of exactly ``size`` characters (the last may be shorter)."""
    if size < 1:
        raise ValueError("size must be positive")
    return [text[i : i + size] for i in range(0, len(text), size)]


def split_with_jitter(text: str, max_size: int, rng: random.Random | None = None) -> list[str]:
    """Split ``text`` at random points into chunks of 1 to ``max_size`` characters."""
    if max_size < 1:
        raise ValueError("max_size must be positive")
    rng = rng or random.Random()
    chunks = []
    position = 0
    while position < len(text):
        size = rng.randint(1, max_size)
        chunks.append(text[position : position + size])
        position += size
    return chunks
