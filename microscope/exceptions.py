"""
Exception classes for microscope.

Malformed Microdata never raises: only failures to obtain or parse the
document itself are surfaced to the caller.
"""

from typing import Optional


class MicrodataError(Exception):
    """Base class for all microscope errors."""


class FetchError(MicrodataError):
    """Network, HTTP or rendering failure while retrieving a document."""

    def __init__(self, url: str, message: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(f"Failed to fetch {url}: {message}")


class ParseError(MicrodataError):
    """Document could not be decoded or turned into an element tree."""
