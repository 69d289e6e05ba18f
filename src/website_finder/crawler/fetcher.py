"""
Playwright page fetcher providing browser sessions for search result extraction.
"""
from typing import List, Optional, Sequence

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
    Error as PWError,
    TimeoutError as PWTimeoutError,
)
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from ..core.config import settings
from ..core.exceptions import NavigationError, SelectorTimeout
from ..core.logging import logger
from ..models.search_result import LinkCandidate


_BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-web-security",
    "--disable-features=IsolateOrigins,site-per-process",
]

_EXTRACT_LINKS_JS = """
els => els.map(a => ({ text: a.innerText || '', href: a.href || '' }))
"""


def _log_launch_retry(retry_state: RetryCallState) -> None:
    error = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(f"Browser launch attempt {retry_state.attempt_number} failed, retrying: {error}")


class BrowserSession:
    """
    One headless browser with a single page, owned by one job at a time.

    Use as an async context manager so the browser is closed on every exit
    path:

        async with fetcher.acquire_session() as session:
            await session.navigate(url)
    """

    def __init__(
        self,
        headless: bool = True,
        user_agent: Optional[str] = None,
        default_timeout_ms: int = 30000,
        launch_attempts: int = 2,
        launch_backoff_s: float = 1.0,
    ):
        self.headless = headless
        self.user_agent = user_agent
        self.default_timeout_ms = default_timeout_ms
        self.launch_attempts = launch_attempts
        self.launch_backoff_s = launch_backoff_s
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._page is not None

    async def start(self) -> "BrowserSession":
        """Launch the browser, retrying transient launch failures."""
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(max(1, self.launch_attempts)),
                wait=wait_exponential(multiplier=self.launch_backoff_s, min=self.launch_backoff_s, max=10.0),
                retry=retry_if_exception_type(PWError),
                before_sleep=_log_launch_retry,
                reraise=True,
            ):
                with attempt:
                    await self._launch()
        except Exception:
            await self.close()
            raise
        logger.info(f"Browser session started (headless={self.headless})")
        return self

    async def _launch(self) -> None:
        await self.close()
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self.headless,
            args=_BROWSER_ARGS,
        )
        context_options = {
            "viewport": {"width": 1366, "height": 900},
            "extra_http_headers": {"Accept-Language": "en-US,en;q=0.9"},
        }
        if self.user_agent:
            context_options["user_agent"] = self.user_agent
        self._context = await self._browser.new_context(**context_options)
        self._context.set_default_timeout(self.default_timeout_ms)
        self._context.set_default_navigation_timeout(self.default_timeout_ms)
        self._page = await self._context.new_page()

    async def close(self) -> None:
        """Close page, context and browser, then stop Playwright."""
        page, context, browser, pw = self._page, self._context, self._browser, self._playwright
        self._page = self._context = self._browser = self._playwright = None

        for name, closer in (
            ("page", page.close if page else None),
            ("context", context.close if context else None),
            ("browser", browser.close if browser else None),
            ("playwright", pw.stop if pw else None),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except Exception as e:
                logger.warning(f"Error while closing {name}: {e}")

    def _require_page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser session is not started")
        return self._page

    async def navigate(
        self,
        url: str,
        wait_until: str = "domcontentloaded",
        timeout_ms: int = 20000,
    ) -> None:
        """
        Navigate the session page.

        Raises:
            NavigationError: On timeout or network failure
        """
        page = self._require_page()
        try:
            await page.goto(url, wait_until=wait_until, timeout=timeout_ms)
        except PWTimeoutError as e:
            raise NavigationError(url, f"timeout after {timeout_ms}ms") from e
        except PWError as e:
            raise NavigationError(url, str(e)) from e

    async def wait_for_any_of(self, selectors: Sequence[str], timeout_ms: int = 10000) -> None:
        """
        Wait until any of the selectors is attached to the DOM.

        Raises:
            SelectorTimeout: If none appears in time
        """
        page = self._require_page()
        try:
            await page.wait_for_selector(
                ", ".join(selectors),
                state="attached",
                timeout=timeout_ms,
            )
        except PWTimeoutError as e:
            raise SelectorTimeout(selectors, timeout_ms) from e

    async def extract_links(self, selectors: Sequence[str]) -> List[LinkCandidate]:
        """Return (text, href) pairs for all anchors currently matching the selectors."""
        page = self._require_page()
        raw = await page.eval_on_selector_all(", ".join(selectors), _EXTRACT_LINKS_JS)
        return [
            LinkCandidate(text=item.get("text") or "", href=item.get("href") or "")
            for item in raw or []
        ]


class PageFetcher:
    """Factory for browser sessions, configured from settings."""

    def __init__(
        self,
        headless: Optional[bool] = None,
        user_agent: Optional[str] = None,
        default_timeout_ms: Optional[int] = None,
        launch_attempts: Optional[int] = None,
    ):
        self.headless = settings.BROWSER_HEADLESS if headless is None else headless
        self.user_agent = user_agent or settings.BROWSER_USER_AGENT
        self.default_timeout_ms = default_timeout_ms or settings.BROWSER_DEFAULT_TIMEOUT_MS
        self.launch_attempts = launch_attempts or settings.BROWSER_LAUNCH_ATTEMPTS

    def acquire_session(self) -> BrowserSession:
        """Create an unstarted session; enter it with ``async with``."""
        return BrowserSession(
            headless=self.headless,
            user_agent=self.user_agent,
            default_timeout_ms=self.default_timeout_ms,
            launch_attempts=self.launch_attempts,
        )
