"""
Streaming Markdown parser.

Feeds appended chunks through the block segmenter and the fragment post-passes
while keeping exactly one fragment open at a time.
"""

import time
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from hother.markstream.blocks.code_lines import split_code_lines
from hother.markstream.blocks.images import split_images
from hother.markstream.blocks.segmenter import BlockSegmenter
from hother.markstream.core.exceptions import ParserConfigurationError
from hother.markstream.core.keys import KeyStabilizer
from hother.markstream.core.models import Fragment, FragmentMeta, NoOpenFragment, OpenFragment, ParserOptions, ParserState
from hother.markstream.utils.logging import get_logger

logger = get_logger(__name__)


def resolve_options(options: ParserOptions | Mapping[str, Any] | None = None, **overrides: Any) -> ParserOptions:
    """
    Build parser options from an instance, a mapping, or keyword overrides.

    Raises:
        ParserConfigurationError: If the options do not validate
    """
    if isinstance(options, ParserOptions) and not overrides:
        return options

    if options is None:
        raw: dict[str, Any] = {}
    elif isinstance(options, ParserOptions):
        raw = options.model_dump()
    else:
        raw = dict(options)
    raw.update(overrides)

    try:
        return ParserOptions.model_validate(raw)
    except ValidationError as e:
        logger.warning("Rejected parser options", options=raw, errors=e.error_count())
        raise ParserConfigurationError(raw, f"Invalid parser options: {e}") from e


class StreamingParser:
    """
    Incremental Markdown segmenter with stable fragment keys.

    Example:
        parser = StreamingParser()
        parser.append_chunk("# Hel")
        parser.append_chunk("lo\\n\\nSome text")
        fragments = parser.finalize()

    The parser is synchronous and not safe for concurrent callers.
    """

    def __init__(self, options: ParserOptions | Mapping[str, Any] | None = None, **overrides: Any):
        """
        Initialize the parser.

        Args:
            options: Parser options, as a model or a mapping
            **overrides: Individual option values, e.g. ``hash_algorithm="djb2"``
        """
        self._options = resolve_options(options, **overrides)
        self._stabilizer = KeyStabilizer(self._options.hash_algorithm)
        self._segmenter = BlockSegmenter(self._stabilizer)
        self._state = ParserState()

    @property
    def options(self) -> ParserOptions:
        return self._options

    @property
    def buffer_length(self) -> int:
        """Number of characters received since the last reset."""
        return len(self._state.buffer)

    # ===== Public operations =====

    def append_chunk(self, chunk: str) -> None:
        """
        Append streamed text and update the fragment list.

        Args:
            chunk: Any text; an empty string is a no-op
        """
        if not isinstance(chunk, str):
            raise TypeError(f"chunk must be str, not {type(chunk).__name__}")
        if not chunk:
            return
        self._state = self._advance(self._state.buffer + chunk)
        logger.debug("Chunk appended", chunk_length=len(chunk), state=self._state.current_state_description)

    def get_fragments(self) -> tuple[Fragment, ...]:
        """
        Snapshot of all fragments in document order.

        Confirmed fragments come first, followed by the open fragment if one
        exists. The returned fragments are copies.
        """
        fragments = list(self._state.fragments)
        if self._state.open_fragment is not None:
            fragments.append(self._state.open_fragment)
        return tuple(fragment.model_copy(deep=True) for fragment in fragments)

    def reset(self) -> None:
        """Discard the buffer and every fragment."""
        self._state = ParserState()
        logger.debug("Parser reset")

    def finalize(self) -> tuple[Fragment, ...]:
        """
        Complete the open fragment, if any, and return the snapshot.

        Calling this again without appending returns an equal snapshot.
        """
        state = self._state
        current = state.open_fragment
        if current is not None:
            completed = self._segmenter.complete(current)
            fragments = [*state.fragments, *self._post_process(completed)]
            self._state = ParserState(
                buffer=state.buffer,
                fragments=fragments,
                current=NoOpenFragment(),
                cursor=state.cursor.advance(state.buffer[state.cursor.offset :]),
            )
            logger.debug("Stream finalized", **completed.log_context(), total_fragments=len(fragments))
        return self.get_fragments()

    def is_complete(self) -> bool:
        """Whether no fragment is open."""
        return self._state.open_fragment is None

    # ===== Internals =====

    def _advance(self, buffer: str) -> ParserState:
        state = self._state
        previous = state.open_fragment
        result = self._segmenter.scan(buffer, state.cursor, len(state.fragments))

        fragments = list(state.fragments)
        for fragment in result.completed:
            if previous is not None and self._continues(previous, fragment):
                fragment = fragment.model_copy(update={"meta": self._touch(previous, fragment)})
            logger.debug("Fragment confirmed", **fragment.log_context())
            fragments.extend(self._post_process(fragment))

        current = NoOpenFragment()
        if result.open_fragment is not None:
            current = OpenFragment(fragment=self._adopt_open(result.open_fragment, previous, len(fragments)))

        return ParserState(buffer=buffer, fragments=fragments, current=current, cursor=result.cursor)

    def _adopt_open(self, fragment: Fragment, previous: Fragment | None, index: int) -> Fragment:
        meta = fragment.meta
        if previous is not None and self._continues(previous, fragment):
            if previous.raw_content == fragment.raw_content:
                return previous
            meta = self._touch(previous, fragment)

        key = self._stabilizer.key_for(fragment.raw_content, index, is_complete=False)
        fragment = fragment.model_copy(update={"key": key, "meta": meta})
        return split_code_lines(fragment, self._options.incomplete_code_strategy, self._options.hash_algorithm)[0]

    def _post_process(self, fragment: Fragment) -> list[Fragment]:
        parts = split_code_lines(fragment, self._options.incomplete_code_strategy, self._options.hash_algorithm)
        return [piece for part in parts for piece in split_images(part, self._options.hash_algorithm)]

    @staticmethod
    def _continues(previous: Fragment, fragment: Fragment) -> bool:
        return previous.position.start == fragment.position.start and previous.type is fragment.type

    @staticmethod
    def _touch(previous: Fragment, fragment: Fragment) -> FragmentMeta:
        if previous.raw_content == fragment.raw_content:
            return previous.meta.model_copy(update={"updated_at": time.time()})
        return previous.meta.model_copy(update={"updated_at": time.time(), "update_count": previous.meta.update_count + 1})
