"""
Block start patterns.

The table is ordered; the first pattern whose ``start`` regex matches a line
decides the block type. Anything unmatched is a paragraph.
"""

import re

from pydantic import BaseModel, ConfigDict, Field

from hother.markstream.core.models import FragmentType

CODE_FENCE = "```"


class BlockPattern(BaseModel):
    """A declarative block classification rule."""

    model_config = ConfigDict(frozen=True)

    type: FragmentType = Field(..., description="Fragment type produced by this rule")
    start: re.Pattern[str] = Field(..., description="Regex matched against the first line")
    single_line: bool = Field(default=False, description="Block never spans more than one line")
    extracts_images: bool = Field(default=False, description="Images are split out on completion")

    def matches(self, line: str) -> bool:
        return self.start.match(line) is not None


CODEBLOCK_PATTERN = BlockPattern(type=FragmentType.CODEBLOCK, start=re.compile(r"^```"))
HEADING_PATTERN = BlockPattern(type=FragmentType.HEADING, start=re.compile(r"^(#{1,6})\s+(\S.*)$"), single_line=True)
LIST_PATTERN = BlockPattern(type=FragmentType.LIST, start=re.compile(r"^(\s*)([-*+]|\d+\.)\s"))
BLOCKQUOTE_PATTERN = BlockPattern(type=FragmentType.BLOCKQUOTE, start=re.compile(r"^>\s*"), extracts_images=True)
THEMATIC_BREAK_PATTERN = BlockPattern(type=FragmentType.THEMATIC_BREAK, start=re.compile(r"^(-{3,}|\*{3,}|_{3,})\s*$"), single_line=True)
PARAGRAPH_PATTERN = BlockPattern(type=FragmentType.PARAGRAPH, start=re.compile(r"^(?!\s*$)"), extracts_images=True)

BLOCK_PATTERNS: tuple[BlockPattern, ...] = (
    CODEBLOCK_PATTERN,
    HEADING_PATTERN,
    LIST_PATTERN,
    BLOCKQUOTE_PATTERN,
    THEMATIC_BREAK_PATTERN,
    PARAGRAPH_PATTERN,
)

_BY_TYPE = {pattern.type: pattern for pattern in BLOCK_PATTERNS}


def classify_line(line: str) -> BlockPattern:
    """
    Classify the first line of a block.

    Args:
        line: A single line without its newline

    Returns:
        The first matching pattern, or the paragraph pattern
    """
    line = line.rstrip("\r")
    for pattern in BLOCK_PATTERNS:
        if pattern.matches(line):
            return pattern
    return PARAGRAPH_PATTERN


def pattern_for(fragment_type: FragmentType) -> BlockPattern | None:
    """Look up the rule that produces ``fragment_type``."""
    return _BY_TYPE.get(fragment_type)


def is_blank(line: str) -> bool:
    return not line.strip()


def is_closing_fence(line: str) -> bool:
    return line.rstrip("\r") == CODE_FENCE
