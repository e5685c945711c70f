import re
import logging
from typing import Optional, Union

from bs4 import BeautifulSoup

from microscope.config import DEFAULT_MAX_DOCUMENT_BYTES, DEFAULT_PARSER
from microscope.exceptions import ParseError

logger = logging.getLogger(__name__)

_CHARSET_RE = re.compile(r"charset\s*=\s*[\"']?([\w.:-]+)", re.IGNORECASE)


def charset_from_content_type(content_type: Optional[str]) -> Optional[str]:
    """
    Pull the charset parameter out of a Content-Type header value.

    A bare label such as "utf-8" is accepted as well.
    """
    if not content_type:
        return None

    match = _CHARSET_RE.search(content_type)
    if match:
        return match.group(1).lower()

    value = content_type.strip()
    if value and ";" not in value and "/" not in value and "=" not in value:
        return value.lower()

    return None


def validate_html(
    html: Union[bytes, str],
    max_size: int = DEFAULT_MAX_DOCUMENT_BYTES
) -> Union[bytes, str]:
    """
    Input guard
    - Ensures the document is bytes or text
    - Prevents memory abuse (max_size <= 0 disables the limit)
    """
    if html is None or not isinstance(html, (bytes, str)):
        raise ParseError("Invalid HTML input")

    if max_size > 0 and len(html) > max_size:
        raise ParseError("HTML size exceeds safe limit")

    return html


def make_soup(
    html: Union[bytes, str],
    charset: Optional[str] = None,
    parser: str = DEFAULT_PARSER,
    max_size: int = DEFAULT_MAX_DOCUMENT_BYTES
) -> BeautifulSoup:
    """
    Create BeautifulSoup object safely.

    Bytes are decoded by BeautifulSoup, trying the declared charset first
    and falling back to its own sniffing.
    """
    html = validate_html(html, max_size)

    try:
        if isinstance(html, bytes):
            return BeautifulSoup(html, parser, from_encoding=charset)
        return BeautifulSoup(html, parser)
    except Exception as e:
        logger.error(f"BeautifulSoup parse failed: {e}")
        raise ParseError(f"HTML parsing failed: {e}") from e
