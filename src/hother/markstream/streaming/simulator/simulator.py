"""Core stream simulation functionality."""

import random
import time
from collections.abc import AsyncGenerator, Iterable

import anyio

from hother.markstream.core.models import Fragment
from hother.markstream.parser import StreamingParser
from hother.markstream.utils.logging import get_logger

from .config import StreamConfig
from .utils import get_random_chunk_size

logger = get_logger(__name__)


def feed_chunks(parser: StreamingParser, chunks: Iterable[str]) -> tuple[Fragment, ...]:
    """
    Append every chunk to ``parser`` and finalize it.

    Args:
        parser: Parser to feed
        chunks: Chunks in arrival order

    Returns:
        The finalized snapshot
    """
    count = 0
    for chunk in chunks:
        parser.append_chunk(chunk)
        count += 1
    fragments = parser.finalize()
    logger.debug("Replayed chunks", chunks=count, fragments=len(fragments))
    return fragments


async def simulate_stream(text: str, config: StreamConfig | None = None) -> AsyncGenerator[dict, None]:
    """Simulate an LLM token stream with jitter, stalls and bursts."""
    if config is None:
        config = StreamConfig()
    rng = random.Random(config.seed)

    start_time = time.time()
    chunk_count = 0

    def data_event(chunk: str, requested: int, position: int, burst: bool) -> dict:
        return {
            "type": "data",
            "chunk": chunk,
            "chunk_size": len(chunk),
            "requested_chunk_size": requested,
            "position": position,
            "total_length": len(text),
            "timestamp": time.time() - start_time,
            "burst": burst,
            "chunk_number": chunk_count,
        }

    i = 0
    while i < len(text):
        if rng.random() < config.stall_probability:
            await anyio.sleep(config.stall_duration)
            yield {"type": "stall", "duration": config.stall_duration, "timestamp": time.time() - start_time}

        if rng.random() < config.burst_probability:
            for _ in range(config.burst_size):
                if i >= len(text):
                    break
                chunk_size = get_random_chunk_size(config, rng)
                chunk = text[i : i + chunk_size]
                i += len(chunk)
                chunk_count += 1
                yield data_event(chunk, chunk_size, i, burst=True)
                await anyio.sleep(0)
        else:
            chunk_size = get_random_chunk_size(config, rng)
            chunk = text[i : i + chunk_size]
            i += len(chunk)
            chunk_count += 1

            delay = config.base_delay
            if rng.random() < config.jitter_probability:
                delay += rng.uniform(-config.jitter, config.jitter)
            await anyio.sleep(max(0, delay))

            yield data_event(chunk, chunk_size, i, burst=False)

    yield {"type": "complete", "timestamp": time.time() - start_time, "total_chunks": chunk_count}
