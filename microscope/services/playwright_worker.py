from typing import Tuple

from playwright.sync_api import sync_playwright


def render_page(url: str, user_agent: str, timeout: int = 60000) -> Tuple[str, str]:
    """
    Render a page in headless Chromium and return (final_url, html).
    """
    with sync_playwright() as p:
        browser = p.chromium.launch(
            headless=True,
            args=[
                "--disable-blink-features=AutomationControlled",
                "--no-sandbox",
                "--disable-dev-shm-usage"
            ]
        )

        try:
            page = browser.new_page(user_agent=user_agent)
            page.set_extra_http_headers({
                "Accept-Language": "en-US,en;q=0.9"
            })

            # avoid networkidle, long-polling pages never settle
            page.goto(url, wait_until="domcontentloaded", timeout=timeout)

            page.wait_for_selector("body", timeout=15000)
            page.wait_for_timeout(3000)

            return page.url, page.content()
        finally:
            browser.close()
