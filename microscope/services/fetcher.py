import logging
from dataclasses import dataclass
from typing import Optional, Union

import requests

from microscope.config import Settings, get_settings
from microscope.exceptions import FetchError
from microscope.services.playwright_worker import render_page
from microscope.utils.html import charset_from_content_type

logger = logging.getLogger(__name__)


def _headers(settings: Settings) -> dict:
    return {
        "User-Agent": settings.user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Connection": "keep-alive",
    }


@dataclass
class FetchedPage:
    url: str                         # final URL after redirects, used as base URL
    content: Union[bytes, str]
    charset: Optional[str] = None
    fetch_mode: str = "static"


# --------------------------------------------------
# Static (requests)
# --------------------------------------------------

def fetch_static(url: str, settings: Optional[Settings] = None) -> FetchedPage:
    settings = settings or get_settings()

    try:
        r = requests.get(
            url,
            headers=_headers(settings),
            timeout=settings.request_timeout,
            allow_redirects=True
        )
        r.raise_for_status()
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        logger.warning(f"Static fetch failed: {e}")
        raise FetchError(url, str(e), status_code=status) from e
    except requests.RequestException as e:
        logger.warning(f"Static fetch failed: {e}")
        raise FetchError(url, str(e)) from e

    content = r.content
    if settings.max_document_bytes > 0:
        content = content[:settings.max_document_bytes]

    charset = charset_from_content_type(r.headers.get("Content-Type"))

    logger.info(
        f"[STATIC] {r.url} status={r.status_code} "
        f"bytes={len(content)} charset={charset}"
    )

    return FetchedPage(
        url=r.url or url,
        content=content,
        charset=charset,
        fetch_mode="static"
    )


# --------------------------------------------------
# Dynamic (playwright)
# --------------------------------------------------

def fetch_dynamic(url: str, settings: Optional[Settings] = None) -> FetchedPage:
    settings = settings or get_settings()

    try:
        final_url, html = render_page(
            url,
            user_agent=settings.user_agent,
            timeout=settings.render_timeout
        )
    except Exception as e:
        logger.warning(f"Dynamic fetch failed: {e}")
        raise FetchError(url, str(e)) from e

    if settings.max_document_bytes > 0:
        html = html[:settings.max_document_bytes]

    logger.info(f"[DYNAMIC] {final_url} html_size={len(html)}")

    return FetchedPage(
        url=final_url or url,
        content=html,
        charset=None,
        fetch_mode="dynamic"
    )


def fetch_page(
    url: str,
    render: bool = False,
    settings: Optional[Settings] = None
) -> FetchedPage:
    logger.info(f"Fetching: {url}")

    if render:
        return fetch_dynamic(url, settings)

    return fetch_static(url, settings)
