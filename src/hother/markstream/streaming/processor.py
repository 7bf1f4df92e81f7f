"""
Async stream processing for LLM token streams.
"""

import time
from collections.abc import AsyncIterator, Iterable
from typing import Any

import anyio
from pydantic import BaseModel, Field

from hother.markstream.core.models import Fragment, ParserOptions
from hother.markstream.parser import StreamingParser
from hother.markstream.utils.logging import get_logger

logger = get_logger(__name__)


class SnapshotDiff(BaseModel):
    """Key-level difference between two fragment snapshots."""

    added: list[str] = Field(default_factory=list, description="Keys present only in the new snapshot")
    removed: list[str] = Field(default_factory=list, description="Keys present only in the old snapshot")
    retained: list[str] = Field(default_factory=list, description="Keys present in both; safe to skip re-rendering")

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed)


def diff_snapshots(previous: Iterable[Fragment], current: Iterable[Fragment]) -> SnapshotDiff:
    """
    Compare two snapshots by key only.

    Args:
        previous: Fragments from an earlier ``get_fragments()`` call
        current: Fragments from a later call

    Returns:
        Added, removed and retained keys, each in document order
    """
    previous_keys = [fragment.key for fragment in previous]
    current_keys = [fragment.key for fragment in current]
    before = set(previous_keys)
    after = set(current_keys)
    return SnapshotDiff(
        added=[key for key in current_keys if key not in before],
        removed=[key for key in previous_keys if key not in after],
        retained=[key for key in current_keys if key in before],
    )


class FragmentUpdate(BaseModel):
    """Parser state after one stream event."""

    timestamp: float = Field(description="Seconds since stream start")
    event_number: int = Field(ge=0, description="Sequential event number")
    event_type: str = Field(default="unknown", description="Type of the original event")
    update_type: str = Field(description="chunk_processed, non_text_event or stream_end")
    chunk: str | None = Field(default=None, description="Text appended for this event")
    fragments: list[Fragment] = Field(default_factory=list, description="Snapshot after this event")
    diff: SnapshotDiff = Field(default_factory=SnapshotDiff, description="Difference from the previous snapshot")

    @property
    def open_fragment(self) -> Fragment | None:
        if self.fragments and not self.fragments[-1].is_complete:
            return self.fragments[-1]
        return None

    def log_context(self) -> dict[str, Any]:
        """Get context dict for structured logging."""
        return {
            "event_number": self.event_number,
            "update_type": self.update_type,
            "fragments": len(self.fragments),
            "added": len(self.diff.added),
            "removed": len(self.diff.removed),
        }


def extract_chunk_text(event: Any) -> str | None:
    """
    Pull streamed text out of common LLM event shapes.

    Strings are returned unchanged; objects are probed for ``text``,
    ``content``, ``chunk`` and ``delta.content``; dicts for the same keys.
    """
    if isinstance(event, str):
        return event
    if isinstance(event, dict):
        value = event.get("chunk") or event.get("text") or event.get("content")
        return value if isinstance(value, str) else None

    for attribute in ("text", "content", "chunk"):
        value = getattr(event, attribute, None)
        if isinstance(value, str):
            return value
    delta = getattr(event, "delta", None)
    if delta is not None and isinstance(getattr(delta, "content", None), str):
        return delta.content
    return None


def _event_type(event: Any) -> str:
    if isinstance(event, dict) and "type" in event:
        return str(event["type"])
    if hasattr(event, "type"):
        return str(event.type)
    return event.__class__.__name__


async def process_markdown_stream(
    stream: AsyncIterator[Any],
    parser: StreamingParser | None = None,
    options: ParserOptions | None = None,
) -> AsyncIterator[FragmentUpdate]:
    """
    Parse a stream of LLM events into fragment snapshots.

    Args:
        stream: Async iterator of strings or LLM events
        parser: Parser to feed (a new one is created if None)
        options: Options for the created parser; ignored when ``parser`` is given

    Yields:
        One FragmentUpdate per event, then a final ``stream_end`` update
        whose fragments are all complete
    """
    if parser is None:
        parser = StreamingParser(options)

    start_time = time.time()
    event_number = 0
    previous = parser.get_fragments()

    async for event in stream:
        event_number += 1
        chunk = extract_chunk_text(event)

        if chunk:
            parser.append_chunk(chunk)
            update_type = "chunk_processed"
        else:
            update_type = "non_text_event"

        current = parser.get_fragments()
        update = FragmentUpdate(
            timestamp=time.time() - start_time,
            event_number=event_number,
            event_type=_event_type(event),
            update_type=update_type,
            chunk=chunk or None,
            fragments=list(current),
            diff=diff_snapshots(previous, current),
        )
        previous = current
        yield update

        # Let other tasks run between chunks of a fast stream
        await anyio.sleep(0)

    final = parser.finalize()
    update = FragmentUpdate(
        timestamp=time.time() - start_time,
        event_number=event_number + 1,
        event_type="stream_end",
        update_type="stream_end",
        fragments=list(final),
        diff=diff_snapshots(previous, final),
    )
    logger.info("Markdown stream finalized", **update.log_context())
    yield update
