"""Stream processing utilities for async token streams."""

from .processor import FragmentUpdate, SnapshotDiff, diff_snapshots, extract_chunk_text, process_markdown_stream
from .simulator import StreamConfig, feed_chunks, simulate_stream, split_by_size, split_with_jitter

__all__ = [
    # Processor exports
    "FragmentUpdate",
    "SnapshotDiff",
    "diff_snapshots",
    "extract_chunk_text",
    "process_markdown_stream",
    # Simulator
    "StreamConfig",
    "feed_chunks",
    "simulate_stream",
    "split_by_size",
    "split_with_jitter",
]
