import logging
from typing import Optional, Union

from microscope.config import Settings, get_settings
from microscope.extractors.microdata_extractor import extract_microdata
from microscope.models.item import Microdata
from microscope.services.fetcher import fetch_page
from microscope.utils.html import make_soup

logger = logging.getLogger(__name__)


# --------------------------------------------------
# ENTRY POINTS
# --------------------------------------------------

def parse_html(
    content: Union[bytes, str],
    base_url: str = "",
    charset: Optional[str] = None,
    settings: Optional[Settings] = None
) -> Microdata:
    """
    Decode, parse and extract one document.

    Raises ParseError when no element tree can be built; malformed
    Microdata itself never raises.
    """
    settings = settings or get_settings()

    soup = make_soup(
        content,
        charset=charset,
        parser=settings.parser,
        max_size=settings.max_document_bytes
    )

    items = extract_microdata(soup, base_url=base_url, max_depth=settings.max_depth)

    logger.info(f"Microdata: {len(items)} top-level items from {base_url or '<input>'}")

    return Microdata(items=items)


def parse_url(
    url: str,
    render: bool = False,
    settings: Optional[Settings] = None
) -> Microdata:
    """
    Fetch a URL and extract its Microdata. The final (post-redirect) URL
    becomes the base URL; the response charset seeds decoding.

    Raises FetchError or ParseError.
    """
    settings = settings or get_settings()

    page = fetch_page(url, render=render, settings=settings)

    return parse_html(
        page.content,
        base_url=page.url,
        charset=page.charset,
        settings=settings
    )
