"""
Key stabilization.

Open fragments get volatile ``temp-`` keys that change whenever their content
length changes; complete fragments get ``frag-`` keys derived only from their
raw content. A stable key is never recomputed.
"""

import time

from hother.markstream.core.hashing import HashAlgorithm, content_hash
from hother.markstream.core.models import Fragment

TEMP_KEY_PREFIX = "temp-"
STABLE_KEY_PREFIX = "frag-"
LINE_KEY_PREFIX = "line-"


def _now_ms() -> int:
    return int(time.time() * 1000)


def temporary_key(index: int, content: str) -> str:
    """Volatile key for an open fragment at sequence position ``index``."""
    return f"{TEMP_KEY_PREFIX}{index}-{len(content)}-{_now_ms()}"


def stable_key(content: str, algorithm: HashAlgorithm | str = HashAlgorithm.MURMUR3) -> str:
    """Content-derived key for a complete fragment."""
    return f"{STABLE_KEY_PREFIX}{content_hash(content, algorithm)}"


def fragment_key(content: str, index: int, is_complete: bool, algorithm: HashAlgorithm | str = HashAlgorithm.MURMUR3) -> str:
    """
    Key for a fragment in its current completion state.

    Args:
        content: Raw content of the fragment
        index: Sequence index of the fragment in the output
        is_complete: Whether the fragment is complete
        algorithm: Hash algorithm for stable keys

    Returns:
        A ``frag-`` key when complete, a ``temp-`` key otherwise
    """
    if is_complete:
        return stable_key(content, algorithm)
    return temporary_key(index, content)


def code_line_key(line_number: int, content: str, is_complete: bool, algorithm: HashAlgorithm | str = HashAlgorithm.MURMUR3) -> str:
    """Per-line key for code block lines, following the same two-class scheme."""
    if is_complete:
        return f"{LINE_KEY_PREFIX}{line_number}-{content_hash(content, algorithm)}"
    return f"{LINE_KEY_PREFIX}{line_number}-temp-{len(content)}-{_now_ms()}"


def is_stable_key(key: str) -> bool:
    """Whether ``key`` belongs to the stable class."""
    return key.startswith(STABLE_KEY_PREFIX)


class KeyStabilizer:
    """Issues fragment keys for one parser session."""

    def __init__(self, algorithm: HashAlgorithm | str = HashAlgorithm.MURMUR3):
        self.algorithm = HashAlgorithm(algorithm)

    def key_for(self, content: str, index: int, is_complete: bool) -> str:
        return fragment_key(content, index, is_complete, self.algorithm)

    def line_key_for(self, line_number: int, content: str, is_complete: bool) -> str:
        return code_line_key(line_number, content, is_complete, self.algorithm)

    def stabilize(self, fragment: Fragment) -> Fragment:
        """
        Return ``fragment`` marked complete with a stable key.

        Fragments that already carry a stable key are returned as-is.
        """
        if fragment.is_complete and is_stable_key(fragment.key):
            return fragment
        return fragment.model_copy(
            update={
                "is_complete": True,
                "key": stable_key(fragment.raw_content, self.algorithm),
            }
        )
