"""
Derive type-specific fragment data from raw content.

Every function here is pure and recomputes the payload from scratch, so the
same raw content always yields the same data.
"""

import re

from hother.markstream.core.models import (
    BlockquoteData,
    CodeBlockData,
    FragmentData,
    FragmentType,
    HeadingData,
    ListData,
    ListItemData,
    ParagraphData,
    ThematicBreakData,
)

from .patterns import HEADING_PATTERN, is_closing_fence

_FENCE_LANG = re.compile(r"^```\s*([^\s`]*)")
_LIST_ITEM = re.compile(r"^(\s*)([-*+]|\d+\.)\s+(?:\[([ xX])\]\s+)?(.*)$")
_QUOTE_PREFIX = re.compile(r"^\s*((?:>\s?)+)")
_IMAGE_HINT = re.compile(r"!\[[^\]]*\]\([^\s)]+")


def heading_data(raw_content: str) -> HeadingData:
    match = HEADING_PATTERN.start.match(raw_content.rstrip("\r"))
    if match is None:
        return HeadingData(level=1, content=raw_content.strip())
    return HeadingData(level=len(match.group(1)), content=match.group(2).rstrip())


def paragraph_data(raw_content: str) -> ParagraphData:
    return ParagraphData(content=raw_content, has_inline_images=_IMAGE_HINT.search(raw_content) is not None)


def code_body_lines(raw_content: str, is_complete: bool) -> list[str]:
    """
    Interior lines of a fenced code block.

    The opening fence is dropped, as is a closing fence on a complete block.
    An empty trailing remainder (the buffer ended right after a newline)
    is not a line yet.
    """
    lines = raw_content.split("\n")[1:]
    if is_complete and lines and is_closing_fence(lines[-1]):
        lines.pop()
    elif lines and lines[-1] == "":
        lines.pop()
    return lines


def codeblock_data(raw_content: str, is_complete: bool) -> CodeBlockData:
    first_line = raw_content.split("\n", 1)[0]
    match = _FENCE_LANG.match(first_line)
    lang = match.group(1) if match else ""
    body = code_body_lines(raw_content, is_complete)
    return CodeBlockData(lang=lang, code="\n".join(line.rstrip("\r") for line in body))


def list_data(raw_content: str) -> ListData:
    items: list[ListItemData] = []
    ordered = False
    start = 1
    for line in raw_content.split("\n"):
        match = _LIST_ITEM.match(line.rstrip("\r"))
        if match is None:
            # Lazy continuation of the previous item
            if items:
                last = items[-1]
                items[-1] = last.model_copy(update={"content": f"{last.content}\n{line.strip()}"})
            else:
                items.append(ListItemData(content=line.strip()))
            continue

        indent, marker, check, text = match.groups()
        if not items:
            ordered = marker[0].isdigit()
            start = int(marker[:-1]) if ordered else 1
        checked = None if check is None else check.lower() == "x"
        items.append(ListItemData(content=text.strip(), checked=checked, level=len(indent.expandtabs(4)) // 2 + 1))
    return ListData(ordered=ordered, start=start, items=items)


def blockquote_data(raw_content: str) -> BlockquoteData:
    level = 1
    contents = []
    for index, line in enumerate(raw_content.split("\n")):
        match = _QUOTE_PREFIX.match(line)
        if match is None:
            contents.append(line.strip())
            continue
        if index == 0:
            level = match.group(1).count(">")
        contents.append(line[match.end() :].rstrip("\r"))
    return BlockquoteData(content="\n".join(contents), level=max(level, 1))


def thematic_break_data(raw_content: str) -> ThematicBreakData:
    stripped = raw_content.strip()
    return ThematicBreakData(marker=stripped[:1] or "-")


def derive_data(fragment_type: FragmentType, raw_content: str, is_complete: bool) -> FragmentData:
    """
    Compute the payload for a block from its raw content.

    Args:
        fragment_type: Block type
        raw_content: Exact source text of the block
        is_complete: Whether the block is complete (affects code fences)

    Returns:
        The type-specific data model
    """
    if fragment_type is FragmentType.HEADING:
        return heading_data(raw_content)
    if fragment_type is FragmentType.CODEBLOCK:
        return codeblock_data(raw_content, is_complete)
    if fragment_type is FragmentType.LIST:
        return list_data(raw_content)
    if fragment_type is FragmentType.BLOCKQUOTE:
        return blockquote_data(raw_content)
    if fragment_type is FragmentType.THEMATIC_BREAK:
        return thematic_break_data(raw_content)
    return paragraph_data(raw_content)

