"""Unit tests for the Playwright page fetcher."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from playwright.async_api import Error as PWError, TimeoutError as PWTimeoutError

from website_finder.core.exceptions import NavigationError, SelectorTimeout
from website_finder.crawler.fetcher import BrowserSession, PageFetcher


def _mock_playwright():
    """Build the async_playwright() -> browser -> context -> page chain."""
    page = AsyncMock()
    context = MagicMock()
    context.new_page = AsyncMock(return_value=page)
    context.close = AsyncMock()
    browser = AsyncMock()
    browser.new_context.return_value = context
    pw = MagicMock()
    pw.chromium.launch = AsyncMock(return_value=browser)
    pw.stop = AsyncMock()
    starter = MagicMock()
    starter.start = AsyncMock(return_value=pw)
    return starter, pw, browser, context, page


@pytest.mark.asyncio
async def test_session_start_and_close():
    starter, pw, browser, context, page = _mock_playwright()

    with patch("website_finder.crawler.fetcher.async_playwright", return_value=starter):
        session = BrowserSession(headless=True, user_agent="test-agent", default_timeout_ms=5000)
        async with session:
            assert session.is_open is True

    assert session.is_open is False
    pw.chromium.launch.assert_awaited_once()
    assert browser.new_context.call_args.kwargs["user_agent"] == "test-agent"
    context.set_default_timeout.assert_called_once_with(5000)
    page.close.assert_awaited_once()
    context.close.assert_awaited_once()
    browser.close.assert_awaited_once()
    pw.stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_close_tolerates_errors():
    starter, pw, browser, context, page = _mock_playwright()
    browser.close.side_effect = PWError("already closed")

    with patch("website_finder.crawler.fetcher.async_playwright", return_value=starter):
        async with BrowserSession():
            pass

    pw.stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_launch_failure_propagates():
    starter, pw, browser, context, page = _mock_playwright()
    pw.chromium.launch.side_effect = PWError("no chromium")

    with patch("website_finder.crawler.fetcher.async_playwright", return_value=starter):
        with pytest.raises(PWError):
            async with BrowserSession(launch_attempts=1):
                pass

    pw.stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_launch_retries_transient_failure():
    starter, pw, browser, context, page = _mock_playwright()
    pw.chromium.launch.side_effect = [PWError("browser crashed"), browser]

    with patch("website_finder.crawler.fetcher.async_playwright", return_value=starter):
        async with BrowserSession(launch_attempts=2, launch_backoff_s=0) as session:
            assert session.is_open is True

    assert pw.chromium.launch.await_count == 2


@pytest.mark.asyncio
async def test_launch_gives_up_after_attempts():
    starter, pw, browser, context, page = _mock_playwright()
    pw.chromium.launch.side_effect = PWError("no chromium")

    with patch("website_finder.crawler.fetcher.async_playwright", return_value=starter):
        with pytest.raises(PWError):
            await BrowserSession(launch_attempts=3, launch_backoff_s=0).start()

    assert pw.chromium.launch.await_count == 3


@pytest.mark.asyncio
async def test_launch_does_not_retry_other_errors():
    starter, pw, browser, context, page = _mock_playwright()
    pw.chromium.launch.side_effect = ValueError("bad launch option")

    with patch("website_finder.crawler.fetcher.async_playwright", return_value=starter):
        with pytest.raises(ValueError):
            await BrowserSession(launch_attempts=3, launch_backoff_s=0).start()

    assert pw.chromium.launch.await_count == 1


@pytest.mark.asyncio
async def test_navigate_maps_errors():
    starter, pw, browser, context, page = _mock_playwright()

    with patch("website_finder.crawler.fetcher.async_playwright", return_value=starter):
        async with BrowserSession() as session:
            await session.navigate("https://www.bing.com/search?q=Acme", timeout_ms=1000)
            page.goto.assert_awaited_with(
                "https://www.bing.com/search?q=Acme",
                wait_until="domcontentloaded",
                timeout=1000,
            )

            page.goto.side_effect = PWTimeoutError("Timeout 1000ms exceeded")
            with pytest.raises(NavigationError) as exc_info:
                await session.navigate("https://www.bing.com/search?q=Acme", timeout_ms=1000)
            assert exc_info.value.details["reason"] == "timeout after 1000ms"

            page.goto.side_effect = PWError("net::ERR_NAME_NOT_RESOLVED")
            with pytest.raises(NavigationError):
                await session.navigate("https://www.bing.com/search?q=Acme")


@pytest.mark.asyncio
async def test_wait_for_any_of():
    starter, pw, browser, context, page = _mock_playwright()

    with patch("website_finder.crawler.fetcher.async_playwright", return_value=starter):
        async with BrowserSession() as session:
            await session.wait_for_any_of(["h2 > a", ".b_algo h2 a"], timeout_ms=500)
            page.wait_for_selector.assert_awaited_with("h2 > a, .b_algo h2 a", state="attached", timeout=500)

            page.wait_for_selector.side_effect = PWTimeoutError("Timeout 500ms exceeded")
            with pytest.raises(SelectorTimeout):
                await session.wait_for_any_of(["h2 > a"], timeout_ms=500)


@pytest.mark.asyncio
async def test_extract_links():
    starter, pw, browser, context, page = _mock_playwright()
    page.eval_on_selector_all.return_value = [
        {"text": "Acme - Official", "href": "https://acme.com/"},
        {"text": "", "href": None},
    ]

    with patch("website_finder.crawler.fetcher.async_playwright", return_value=starter):
        async with BrowserSession() as session:
            links = await session.extract_links(["h2 > a"])

    assert [(link.text, link.href) for link in links] == [("Acme - Official", "https://acme.com/"), ("", "")]


@pytest.mark.asyncio
async def test_session_requires_start():
    with pytest.raises(RuntimeError):
        await BrowserSession().navigate("https://example.com")


def test_page_fetcher_builds_sessions():
    fetcher = PageFetcher(headless=False, default_timeout_ms=1234, launch_attempts=3)

    session = fetcher.acquire_session()

    assert isinstance(session, BrowserSession)
    assert session.headless is False
    assert session.default_timeout_ms == 1234
    assert session.launch_attempts == 3
    assert session.is_open is False
