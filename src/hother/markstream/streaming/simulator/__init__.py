"""Simulated LLM streams for exercising the parser."""

from .config import StreamConfig
from .simulator import feed_chunks, simulate_stream
from .utils import split_by_size, split_with_jitter

__all__ = [
    "StreamConfig",
    "feed_chunks",
    "simulate_stream",
    "split_by_size",
    "split_with_jitter",
]
