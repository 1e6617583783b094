"""
Headless browser fetcher - retrieves resources served behind an anti-bot
interstitial ("Just a moment...") by driving a real Chromium through Playwright.

The origin is loaded first so the browser context collects the clearance
cookies, then the resource is requested through that same context.
"""
import json
import logging
from typing import Protocol

from playwright.async_api import async_playwright, BrowserContext, Page

from ..exceptions import AcquisitionError

logger = logging.getLogger(__name__)

CHALLENGE_MARKERS = (
    "Just a moment",
    "Checking your browser",
    "cf-spinner",
    "Verifying you are human",
)

BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--disable-blink-features=AutomationControlled",
    "--window-size=1920,1080",
]

USER_AGENT = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

ORIGIN_TIMEOUT_MS = 60_000

# Runs in the page: true once no challenge marker is left in the body
_CHALLENGE_CLEARED_JS = (
    "() => { const body = document.body ? document.body.innerHTML : '';"
    f" return !{json.dumps(list(CHALLENGE_MARKERS))}.some(m => body.includes(m)); }}"
)


class PageFetcher(Protocol):
    async def fetch_rendered_page(self, url: str) -> bytes:
        """Return the final bytes for `url` after any client-side challenge is resolved."""
        ...


def is_challenge_content(content) -> bool:
    if isinstance(content, bytes):
        content = content[:8192].decode("utf-8", errors="ignore")
    return any(marker in content for marker in CHALLENGE_MARKERS)


class PlaywrightPageFetcher:
    def __init__(
        self,
        origin_url: str,
        headless: bool = True,
        navigation_timeout_ms: int = 180_000,
        challenge_timeout_ms: int = 45_000,
    ):
        self.origin_url = origin_url
        self.headless = headless
        self.navigation_timeout_ms = navigation_timeout_ms
        self.challenge_timeout_ms = challenge_timeout_ms

    async def fetch_rendered_page(self, url: str) -> bytes:
        logger.info("[BROWSER] Launching Chromium...")
        async with async_playwright() as p:
            browser = await p.chromium.launch(headless=self.headless, args=BROWSER_ARGS)
            try:
                context = await browser.new_context(
                    user_agent=USER_AGENT,
                    locale="pt-BR",
                    viewport={"width": 1920, "height": 1080},
                    extra_http_headers={
                        "Accept-Language": "pt-BR,pt;q=0.9,en-US;q=0.8,en;q=0.7",
                    },
                )
                page = await context.new_page()

                await self._pass_challenge(page)
                logger.info(f"[BROWSER] Requesting resource: {url}")
                body = await self._request(context, url)

                if is_challenge_content(body):
                    logger.info("[BROWSER] Challenge served again, waiting and retrying once...")
                    await self._pass_challenge(page)
                    body = await self._request(context, url)

                logger.info(f"[BROWSER] Received {len(body) / 1024 / 1024:.2f} MB")
                return body
            finally:
                await browser.close()

    async def _pass_challenge(self, page: Page) -> None:
        await page.goto(self.origin_url, wait_until="networkidle", timeout=ORIGIN_TIMEOUT_MS)
        # Let the challenge script start before inspecting the page
        await page.wait_for_timeout(2000)

        if is_challenge_content(await page.content()):
            logger.info("[BROWSER] Challenge detected, waiting for it to complete...")
            await page.wait_for_function(_CHALLENGE_CLEARED_JS, timeout=self.challenge_timeout_ms)
            logger.info("[BROWSER] Challenge passed")
            await page.wait_for_timeout(1000)

    async def _request(self, context: BrowserContext, url: str) -> bytes:
        response = await context.request.get(url, timeout=self.navigation_timeout_ms)
        body = await response.body()
        # Challenge pages come back as 403/503; let the caller decide on those
        if not response.ok and not is_challenge_content(body):
            raise AcquisitionError(f"HTTP {response.status} while downloading {url}")
        return body
