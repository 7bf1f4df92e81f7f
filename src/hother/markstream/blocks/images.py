"""
Image isolation post-pass.

A completed paragraph or blockquote containing image markup is replaced by an
ordered run of text and image fragments. Each image fragment's raw content is
exactly its own markup, so its stable key does not depend on the prose around
it.
"""

import re

from hother.markstream.core.hashing import HashAlgorithm
from hother.markstream.core.keys import stable_key
from hother.markstream.core.models import Fragment, FragmentData, FragmentMeta, FragmentType, ImageData, SourcePosition

from .data import derive_data
from .patterns import pattern_for

IMAGE_PATTERN = re.compile(r'!\[([^\]]*)\]\(([^\s)]+)(?:\s+"([^"]*)")?\)')


def _extracts_images(fragment: Fragment) -> bool:
    pattern = pattern_for(fragment.type)
    return pattern is not None and pattern.extracts_images


def _span_position(fragment: Fragment, span_start: int, span_end: int) -> SourcePosition:
    prefix = fragment.raw_content[:span_start]
    newlines = prefix.count("\n")
    if newlines:
        column = span_start - prefix.rfind("\n")
    else:
        column = fragment.position.column + span_start
    return SourcePosition(
        start=fragment.position.start + span_start,
        end=fragment.position.start + span_end,
        line=fragment.position.line + newlines,
        column=column,
    )


def _sub_fragment(
    fragment: Fragment,
    fragment_type: FragmentType,
    raw_content: str,
    data: FragmentData,
    position: SourcePosition,
    algorithm: HashAlgorithm,
) -> Fragment:
    return Fragment(
        key=stable_key(raw_content, algorithm),
        type=fragment_type,
        raw_content=raw_content,
        is_complete=True,
        position=position,
        data=data,
        meta=FragmentMeta(from_streaming=fragment.meta.from_streaming),
    )


def split_images(fragment: Fragment, algorithm: HashAlgorithm | str = HashAlgorithm.MURMUR3) -> list[Fragment]:
    """
    Split image markup out of a completed container fragment.

    Args:
        fragment: A fragment of any type
        algorithm: Hash algorithm for the sub-fragment keys

    Returns:
        ``[fragment]`` when nothing applies, otherwise the text and image
        fragments in document order
    """
    if not fragment.is_complete or not _extracts_images(fragment):
        return [fragment]

    content = fragment.raw_content
    matches = list(IMAGE_PATTERN.finditer(content))
    if not matches:
        return [fragment]

    algorithm = HashAlgorithm(algorithm)
    parts: list[Fragment] = []

    def add_text(span_start: int, span_end: int) -> None:
        text = content[span_start:span_end]
        # Whitespace between images is not a fragment
        if not text.strip():
            return
        parts.append(
            _sub_fragment(
                fragment,
                fragment.type,
                text,
                derive_data(fragment.type, text, is_complete=True),
                _span_position(fragment, span_start, span_end),
                algorithm,
            )
        )

    last_end = 0
    for match in matches:
        add_text(last_end, match.start())
        alt, src, title = match.groups()
        parts.append(
            _sub_fragment(
                fragment,
                FragmentType.IMAGE,
                match.group(0),
                ImageData(alt=alt, src=src, title=title),
                _span_position(fragment, match.start(), match.end()),
                algorithm,
            )
        )
        last_end = match.end()
    add_text(last_end, len(content))

    return parts
