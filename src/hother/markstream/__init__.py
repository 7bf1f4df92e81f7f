"""
Markstream - Streaming Markdown Fragments for LLM Output

Incrementally segments a growing Markdown stream into block-level fragments
whose keys stay stable once a block is complete, so renderers can skip
unchanged content by comparing keys.
"""

import importlib.metadata

from .core.exceptions import MarkstreamError, ParserConfigurationError
from .core.hashing import HashAlgorithm, content_hash, djb2, murmur3
from .core.keys import (
    STABLE_KEY_PREFIX,
    TEMP_KEY_PREFIX,
    KeyStabilizer,
    code_line_key,
    fragment_key,
    is_stable_key,
)
from .core.models import (
    BlockquoteData,
    CodeBlockData,
    CodeLine,
    CodeLineStrategy,
    Fragment,
    FragmentData,
    FragmentMeta,
    FragmentType,
    HeadingData,
    ImageData,
    ListData,
    ListItemData,
    ParagraphData,
    ParserOptions,
    ParserState,
    SourcePosition,
    ThematicBreakData,
)
from .parser import StreamingParser, resolve_options

try:
    __version__ = importlib.metadata.version("hother-markstream")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0+dev"

__all__ = [
    # Parser
    "StreamingParser",
    "resolve_options",
    # Models
    "Fragment",
    "FragmentType",
    "FragmentData",
    "FragmentMeta",
    "SourcePosition",
    "HeadingData",
    "ParagraphData",
    "CodeBlockData",
    "CodeLine",
    "ListData",
    "ListItemData",
    "BlockquoteData",
    "ThematicBreakData",
    "ImageData",
    "ParserOptions",
    "ParserState",
    "CodeLineStrategy",
    # Hashing and keys
    "HashAlgorithm",
    "content_hash",
    "murmur3",
    "djb2",
    "KeyStabilizer",
    "fragment_key",
    "code_line_key",
    "is_stable_key",
    "STABLE_KEY_PREFIX",
    "TEMP_KEY_PREFIX",
    # Exceptions
    "MarkstreamError",
    "ParserConfigurationError",
]
