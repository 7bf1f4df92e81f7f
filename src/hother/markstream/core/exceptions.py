"""
Custom exceptions for the streaming fragment parser.

Markdown input never raises: anything unrecognized degrades to a paragraph.
These exceptions only cover misuse of the API surface.
"""

from typing import Any


class MarkstreamError(Exception):
    """Base exception for markstream errors."""


class ParserConfigurationError(MarkstreamError, ValueError):
    """
    Parser options failed validation.

    Attributes:
        options: The rejected options as given by the caller
        message: Human-readable description of the problem
    """

    def __init__(self, options: Any, message: str | None = None):
        self.options = options
        self.message = message or f"Invalid parser options: {options!r}"
        super().__init__(self.message)
