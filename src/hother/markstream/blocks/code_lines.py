"""
Line-level granularity for code blocks.

While a fence is still open, a renderer only needs to repaint the trailing
line that is still growing; every line before it is final.
"""

from hother.markstream.core.hashing import HashAlgorithm
from hother.markstream.core.keys import code_line_key
from hother.markstream.core.models import CodeBlockData, CodeLine, CodeLineStrategy, Fragment, FragmentType

from .data import code_body_lines


def _trailing_line_open(fragment: Fragment) -> bool:
    # An open block whose raw content ends with a newline has no partial line
    return not fragment.is_complete and not fragment.raw_content.endswith("\n")


def split_code_lines(
    fragment: Fragment,
    strategy: CodeLineStrategy | str = CodeLineStrategy.LINE,
    algorithm: HashAlgorithm | str = HashAlgorithm.MURMUR3,
) -> list[Fragment]:
    """
    Attach line records to a code block according to ``strategy``.

    Args:
        fragment: A fragment of any type
        strategy: ``line`` adds per-line records, ``char`` exposes the partial
            trailing line in ``code``, ``none`` withholds it until terminated
        algorithm: Hash algorithm for per-line keys

    Returns:
        A single-element list with the (possibly updated) fragment
    """
    if fragment.type is not FragmentType.CODEBLOCK or not isinstance(fragment.data, CodeBlockData):
        return [fragment]

    strategy = CodeLineStrategy(strategy)
    body = [line.rstrip("\r") for line in code_body_lines(fragment.raw_content, fragment.is_complete)]
    partial_tail = bool(body) and _trailing_line_open(fragment)

    if strategy is CodeLineStrategy.LINE:
        last_index = len(body) - 1
        lines = []
        for index, content in enumerate(body):
            is_complete = not (partial_tail and index == last_index)
            lines.append(
                CodeLine(
                    content=content,
                    line_number=index + 1,
                    is_complete=is_complete,
                    key=code_line_key(index + 1, content, is_complete, algorithm),
                )
            )
        data = fragment.data.model_copy(update={"code": "\n".join(body), "lines": lines})
    elif strategy is CodeLineStrategy.NONE and partial_tail:
        data = fragment.data.model_copy(update={"code": "\n".join(body[:-1]), "lines": None})
    else:
        data = fragment.data.model_copy(update={"code": "\n".join(body), "lines": None})

    return [fragment.model_copy(update={"data": data})]
