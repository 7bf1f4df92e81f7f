"""Block segmentation and fragment post-passes."""

from .code_lines import split_code_lines
from .data import derive_data
from .images import IMAGE_PATTERN, split_images
from .patterns import BLOCK_PATTERNS, BlockPattern, classify_line
from .segmenter import BlockSegmenter, ScanResult, SourceLine, iter_lines

__all__ = [
    # Classification
    "BLOCK_PATTERNS",
    "BlockPattern",
    "classify_line",
    # Segmentation
    "BlockSegmenter",
    "ScanResult",
    "SourceLine",
    "derive_data",
    "iter_lines",
    # Post-passes
    "IMAGE_PATTERN",
    "split_code_lines",
    "split_images",
]
