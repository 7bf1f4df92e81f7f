"""
Line-oriented block segmentation.

The segmenter walks the unconfirmed tail of the buffer one line at a time and
drives each block through ``OPEN -> COMPLETE``. A line is terminated when a
newline follows it in the buffer; the trailing remainder may still grow.
"""

import time
from collections.abc import Iterator
from typing import NamedTuple

from pydantic import BaseModel, Field

from hother.markstream.core.keys import KeyStabilizer
from hother.markstream.core.models import Fragment, FragmentMeta, FragmentType, ScanCursor, SourcePosition

from .data import derive_data
from .patterns import BlockPattern, classify_line, is_blank, is_closing_fence


class SourceLine(NamedTuple):
    """A physical line of the buffer."""

    text: str
    start: int
    line: int
    column: int
    terminated: bool

    @property
    def end(self) -> int:
        return self.start + len(self.text)

    def cursor_after(self) -> ScanCursor:
        """Cursor positioned at the start of the next line."""
        return ScanCursor(offset=self.end + 1, line=self.line + 1, column=1)


def iter_lines(buffer: str, cursor: ScanCursor) -> Iterator[SourceLine]:
    """
    Split ``buffer`` into lines starting at ``cursor``.

    The last line yielded is never terminated; it is empty when the buffer
    ends with a newline.
    """
    offset, line, column = cursor.offset, cursor.line, cursor.column
    while True:
        newline = buffer.find("\n", offset)
        if newline == -1:
            yield SourceLine(buffer[offset:], offset, line, column, False)
            return
        yield SourceLine(buffer[offset:newline], offset, line, column, True)
        offset, line, column = newline + 1, line + 1, 1


class ScanResult(BaseModel):
    """Outcome of scanning the unconfirmed tail."""

    completed: list[Fragment] = Field(default_factory=list, description="Blocks that reached completion, in order")
    open_fragment: Fragment | None = Field(default=None, description="The block still accumulating, if any")
    cursor: ScanCursor = Field(..., description="Start of the first line not owned by a completed block")


class _BlockBuilder:
    """Accumulates the lines of one block."""

    def __init__(self, pattern: BlockPattern, first: SourceLine):
        self.pattern = pattern
        self.first = first
        self.end = first.start
        self.add(first)

    @property
    def type(self) -> FragmentType:
        return self.pattern.type

    def add(self, line: SourceLine) -> None:
        # Code blocks own the newline of every terminated line
        if self.type is FragmentType.CODEBLOCK and line.terminated:
            self.end = line.end + 1
        else:
            self.end = line.end

    def close(self, line: SourceLine) -> None:
        self.end = line.end


class BlockSegmenter:
    """Drives the per-block completion state machine."""

    def __init__(self, stabilizer: KeyStabilizer | None = None):
        self.stabilizer = stabilizer or KeyStabilizer()

    def scan(self, buffer: str, cursor: ScanCursor, sequence_start: int = 0) -> ScanResult:
        """
        Segment ``buffer`` from ``cursor`` to its end.

        Args:
            buffer: The whole accumulated buffer
            cursor: Start of the unconfirmed tail
            sequence_start: Output index of the first block found

        Returns:
            Completed blocks, the open block and the advanced cursor
        """
        completed: list[Fragment] = []
        builder: _BlockBuilder | None = None

        def complete(current: _BlockBuilder) -> None:
            completed.append(self._build(current, buffer, sequence_start + len(completed), is_complete=True))

        for line in iter_lines(buffer, cursor):
            if builder is None:
                if is_blank(line.text):
                    if line.terminated:
                        cursor = line.cursor_after()
                    continue
                builder = _BlockBuilder(classify_line(line.text), line)
                if builder.pattern.single_line and line.terminated:
                    complete(builder)
                    cursor = line.cursor_after()
                    builder = None
                continue

            if builder.type is FragmentType.CODEBLOCK:
                if line.terminated and is_closing_fence(line.text):
                    builder.close(line)
                    complete(builder)
                    cursor = line.cursor_after()
                    builder = None
                elif line.terminated or line.text:
                    builder.add(line)
                continue

            if is_blank(line.text):
                if line.terminated:
                    complete(builder)
                    cursor = line.cursor_after()
                    builder = None
                continue
            builder.add(line)

        open_fragment = None
        if builder is not None:
            open_fragment = self._build(builder, buffer, sequence_start + len(completed), is_complete=False)
        return ScanResult(completed=completed, open_fragment=open_fragment, cursor=cursor)

    def complete(self, fragment: Fragment) -> Fragment:
        """
        Force an open fragment to completion.

        The payload is recomputed from the raw content and the key stabilized.
        """
        if fragment.is_complete:
            return fragment
        now = time.time()
        meta = fragment.meta.model_copy(update={"updated_at": now, "update_count": fragment.meta.update_count + 1})
        data = derive_data(fragment.type, fragment.raw_content, is_complete=True)
        return self.stabilizer.stabilize(fragment.model_copy(update={"data": data, "meta": meta}))

    def _build(self, builder: _BlockBuilder, buffer: str, index: int, is_complete: bool) -> Fragment:
        raw_content = buffer[builder.first.start : builder.end]
        return Fragment(
            key=self.stabilizer.key_for(raw_content, index, is_complete),
            type=builder.type,
            raw_content=raw_content,
            is_complete=is_complete,
            position=SourcePosition(
                start=builder.first.start,
                end=builder.first.start + len(raw_content),
                line=builder.first.line,
                column=builder.first.column,
            ),
            data=derive_data(builder.type, raw_content, is_complete),
            meta=FragmentMeta(),
        )
