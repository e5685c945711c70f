import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

from fastapi import APIRouter, HTTPException
from fastapi.concurrency import run_in_threadpool

from microscope.analyzer.orchestrator import parse_html, parse_url
from microscope.exceptions import FetchError, MicrodataError
from microscope.schemas.extract import ExtractRequest, ExtractResponse

logger = logging.getLogger(__name__)

router = APIRouter()

MAX_URLS = 5
MAX_HTMLS = 5


# --------------------------------------------------
# URL PROCESSOR (PARALLEL SAFE)
# --------------------------------------------------

async def process_url(url: str, render: bool = False) -> Tuple[str, Dict[str, Any]]:

    try:
        data = await run_in_threadpool(parse_url, url, render)
        return url, data.to_dict()

    except MicrodataError as e:
        logger.warning(f"Extraction failed for {url}: {e}")
        return url, {"error": str(e)}


# --------------------------------------------------
# HTML PROCESSOR
# --------------------------------------------------

async def process_html(
    i: int,
    html: str,
    base_url: str = "",
    charset: Optional[str] = None
) -> Tuple[str, Dict[str, Any]]:

    try:
        data = await run_in_threadpool(parse_html, html, base_url, charset)
        return f"html_{i}", data.to_dict()

    except MicrodataError as e:
        logger.warning(f"Extraction failed for html_{i}: {e}")
        return f"html_{i}", {"error": str(e)}


# --------------------------------------------------
# EXTRACT ENDPOINT
# --------------------------------------------------

@router.post("/extract", response_model=ExtractResponse)
async def extract(payload: ExtractRequest):

    # ---------------- MULTIPLE URLS ----------------

    if payload.urls is not None:

        urls = payload.urls

        if not urls:
            raise HTTPException(400, "'urls' must be a non-empty list")

        if len(urls) > MAX_URLS:
            raise HTTPException(
                400, f"Maximum {MAX_URLS} URLs allowed"
            )

        tasks = [process_url(url, payload.render) for url in urls]

        results_list = await asyncio.gather(*tasks)

        return {
            "total": len(results_list),
            "results": dict(results_list)
        }

    # ---------------- SINGLE URL ----------------

    if payload.url is not None:

        try:
            data = await run_in_threadpool(parse_url, payload.url, payload.render)
        except FetchError as e:
            raise HTTPException(502, str(e))
        except MicrodataError as e:
            raise HTTPException(422, str(e))

        return {
            "total": 1,
            "results": {payload.url: data.to_dict()}
        }

    # ---------------- MULTIPLE HTML ----------------

    if payload.htmls is not None:

        htmls = payload.htmls

        if not htmls:
            raise HTTPException(400, "'htmls' must be a non-empty list")

        if len(htmls) > MAX_HTMLS:
            raise HTTPException(
                400, f"Maximum {MAX_HTMLS} HTMLs allowed"
            )

        tasks = [
            process_html(i, html, payload.base_url, payload.charset)
            for i, html in enumerate(htmls, start=1)
        ]

        results_list = await asyncio.gather(*tasks)

        return {
            "total": len(results_list),
            "results": dict(results_list)
        }

    # ---------------- SINGLE HTML ----------------

    if payload.html is not None:

        try:
            data = await run_in_threadpool(
                parse_html,
                payload.html,
                payload.base_url,
                payload.charset
            )
        except MicrodataError as e:
            raise HTTPException(422, str(e))

        return {
            "total": 1,
            "results": {"html_1": data.to_dict()}
        }

    raise HTTPException(
        400,
        "Provide 'url', 'urls', 'html', or 'htmls'"
    )
