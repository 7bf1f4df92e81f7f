"""
Core models for the streaming fragment system.
"""

import time
from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from hother.markstream.core.hashing import HashAlgorithm


class _WireModel(BaseModel):
    """Base for models that serialize with camelCase aliases."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FragmentType(str, Enum):
    """Block-level fragment types."""

    HEADING = "heading"
    PARAGRAPH = "paragraph"
    CODEBLOCK = "codeblock"
    LIST = "list"
    LIST_ITEM = "listItem"
    BLOCKQUOTE = "blockquote"
    IMAGE = "image"
    THEMATIC_BREAK = "thematicBreak"
    HTML = "html"
    TABLE = "table"
    INCOMPLETE = "incomplete"


class CodeLineStrategy(str, Enum):
    """How an open code block exposes its still-growing content."""

    LINE = "line"
    CHAR = "char"
    NONE = "none"


class SourcePosition(_WireModel):
    """Location of a fragment in the accumulated buffer."""

    start: int = Field(..., ge=0, description="Start character offset")
    end: int = Field(..., ge=0, description="End character offset (exclusive)")
    line: int = Field(default=1, ge=1, description="1-based line of the start")
    column: int = Field(default=1, ge=1, description="1-based column of the start")

    @model_validator(mode="after")
    def _check_span(self) -> "SourcePosition":
        if self.end < self.start:
            raise ValueError(f"position end {self.end} precedes start {self.start}")
        return self


class FragmentMeta(_WireModel):
    """Provenance information. Never used for identity."""

    created_at: float = Field(default_factory=time.time)
    updated_at: float = Field(default_factory=time.time)
    update_count: int = Field(default=0, ge=0)
    from_streaming: bool = True


# ===== Type-specific payloads =====


class HeadingData(_WireModel):
    level: int = Field(..., ge=1, le=6)
    content: str


class ParagraphData(_WireModel):
    content: str
    has_inline_images: bool = False


class CodeLine(_WireModel):
    """A single line of a code block."""

    content: str
    line_number: int = Field(..., ge=1)
    is_complete: bool
    key: str = ""


class CodeBlockData(_WireModel):
    lang: str = ""
    code: str = ""
    lines: list[CodeLine] | None = None


class ListItemData(_WireModel):
    content: str
    checked: bool | None = None
    level: int = Field(default=1, ge=1)


class ListData(_WireModel):
    ordered: bool
    start: int = 1
    items: list[ListItemData] = Field(default_factory=list)


class BlockquoteData(_WireModel):
    content: str
    level: int = Field(default=1, ge=1)


class ThematicBreakData(_WireModel):
    marker: str


class ImageData(_WireModel):
    alt: str
    src: str
    title: str | None = None


FragmentData = HeadingData | ParagraphData | CodeBlockData | ListData | BlockquoteData | ThematicBreakData | ImageData


class Fragment(_WireModel):
    """A block-level unit of parsed Markdown with an identity key."""

    key: str = Field(..., description="Identity key; stable once complete")
    type: FragmentType = Field(..., description="Block type")
    raw_content: str = Field(..., description="Exact source substring")
    is_complete: bool = Field(default=False, description="Whether the fragment is final")
    position: SourcePosition
    data: FragmentData
    children: list["Fragment"] | None = Field(default=None, description="Reserved for nested blocks")
    meta: FragmentMeta = Field(default_factory=FragmentMeta)

    def __str__(self) -> str:
        """String representation."""
        state = "complete" if self.is_complete else "open"
        return f"Fragment[{self.key}:{self.type.value}:{state}]"

    def log_context(self) -> dict[str, Any]:
        """Get context dict for structured logging."""
        return {
            "fragment_key": self.key,
            "fragment_type": self.type.value,
            "content_length": len(self.raw_content),
            "is_complete": self.is_complete,
            "line": self.position.line,
        }


class ParserOptions(_WireModel):
    """Construction-time parser configuration."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, extra="forbid")

    incomplete_code_strategy: CodeLineStrategy = Field(default=CodeLineStrategy.LINE, description="Open code block granularity")
    hash_algorithm: HashAlgorithm = Field(default=HashAlgorithm.MURMUR3, description="Algorithm for stable keys")
    preload_images: bool = Field(default=False, description="Forwarded to rendering layers; unused by the parser")


# ===== Parser state =====


class ScanCursor(BaseModel):
    """Position of the first buffer character not owned by a confirmed fragment."""

    model_config = ConfigDict(frozen=True)

    offset: int = Field(default=0, ge=0)
    line: int = Field(default=1, ge=1)
    column: int = Field(default=1, ge=1)

    def advance(self, text: str) -> "ScanCursor":
        """Return the cursor moved past ``text``."""
        if not text:
            return self
        newlines = text.count("\n")
        if newlines:
            column = len(text) - text.rfind("\n")
        else:
            column = self.column + len(text)
        return ScanCursor(offset=self.offset + len(text), line=self.line + newlines, column=column)


class NoOpenFragment(BaseModel):
    """Nothing is being accumulated."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["idle"] = "idle"


class OpenFragment(BaseModel):
    """Exactly one fragment is being accumulated."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["open"] = "open"
    fragment: Fragment

    @model_validator(mode="after")
    def _must_be_open(self) -> "OpenFragment":
        if self.fragment.is_complete:
            raise ValueError("an open slot cannot hold a complete fragment")
        return self


CurrentFragment = Annotated[NoOpenFragment | OpenFragment, Field(discriminator="kind")]


class ParserState(BaseModel):
    """Mutable state owned by a single StreamingParser."""

    model_config = ConfigDict(validate_assignment=True)

    buffer: str = Field(default="", description="Accumulated input")
    fragments: list[Fragment] = Field(default_factory=list, description="Confirmed fragments in document order")
    current: CurrentFragment = Field(default_factory=NoOpenFragment, description="The open fragment, if any")
    cursor: ScanCursor = Field(default_factory=ScanCursor, description="Start of the unconfirmed tail")

    @property
    def open_fragment(self) -> Fragment | None:
        """The open fragment, or None."""
        if isinstance(self.current, OpenFragment):
            return self.current.fragment
        return None

    @property
    def current_state_description(self) -> str:
        """Get human-readable state description."""
        fragment = self.open_fragment
        if fragment is None:
            return f"idle_{len(self.fragments)}_confirmed"
        return f"open_{fragment.type.value}_{len(fragment.raw_content)}_chars"
