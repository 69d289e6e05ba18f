"""
Link resolver: turns a company name into a candidate website using a browser session.
"""
import re
from typing import Optional, Sequence

from .config import SearchConfig
from ..core.exceptions import NavigationError, ResolutionError, SelectorTimeout
from ..core.logging import logger
from ..models.search_result import LinkCandidate, ResolveResult
from ..utils.url_utils import (
    decode_redirect_link,
    encode_query,
    is_blocked_link,
    is_redirect_link,
)


_QUERY_UNSAFE = re.compile(r"[&/\\#,+()$~%.'\":*?<>{}]")
_WHITESPACE = re.compile(r"\s+")


def sanitize_company_name(name: str) -> str:
    """Replace query-hostile punctuation with spaces and collapse whitespace."""
    cleaned = _QUERY_UNSAFE.sub(" ", name or "")
    return _WHITESPACE.sub(" ", cleaned).strip()


def select_website(links: Sequence[LinkCandidate], blocked_domains: Sequence[str]) -> str:
    """
    Pick the website from extracted result links.

    Takes the first non-empty href outside the blocklist and unwraps it if it
    is a redirect link. Deterministic for a given link list.

    Raises:
        ResolutionError: If the selected redirect link cannot be decoded
    """
    for link in links:
        href = (link.href or "").strip()
        if not href or is_blocked_link(href, blocked_domains):
            continue
        if is_redirect_link(href):
            return decode_redirect_link(href)
        return href
    return ""


class LinkResolver:
    """
    Resolves company names to websites through search result pages.

    Features:
    - Query sanitizing for search engines
    - Simplified single-token retry when navigation fails
    - Non-fatal wait for result markup
    - Domain blocklist and redirect unwrapping
    """

    def __init__(self, config: Optional[SearchConfig] = None):
        self.config = config or SearchConfig.from_settings()

    def build_search_url(self, query: str) -> str:
        return self.config.search_url_template.format(query=encode_query(query))

    async def _navigate(self, session, query: str) -> str:
        """Open the results page for a query, falling back to its first token."""
        try:
            await session.navigate(
                self.build_search_url(query),
                wait_until=self.config.wait_until.value,
                timeout_ms=self.config.navigation_timeout_ms,
            )
            return query
        except NavigationError:
            simplified = query.split(" ")[0] if query else ""
            if len(simplified) < self.config.min_fallback_token_length:
                raise
            logger.warning(f"Navigation error for '{query}', trying simplified query '{simplified}'")
            await session.navigate(
                self.build_search_url(simplified),
                wait_until=self.config.wait_until.value,
                timeout_ms=self.config.navigation_timeout_ms,
            )
            return simplified

    async def resolve(self, company: str, session) -> ResolveResult:
        """
        Resolve a single company.

        Args:
            company: Company name as ingested
            session: Started browser session (see ``PageFetcher``)

        Returns:
            ResolveResult; ``website`` is empty when nothing usable was found
        """
        query = sanitize_company_name(company)
        if not query:
            logger.warning(f"Nothing searchable in company name '{company}'")
            return ResolveResult(company=company)

        try:
            query = await self._navigate(session, query)

            try:
                await session.wait_for_any_of(
                    self.config.link_selectors,
                    timeout_ms=self.config.selector_timeout_ms,
                )
            except SelectorTimeout:
                logger.warning(f"Selector not found for '{company}', continuing with extraction anyway")

            links = await session.extract_links(self.config.link_selectors)
            website = select_website(links, self.config.blocked_domains)

        except ResolutionError as e:
            logger.error(f"Error resolving '{company}': {e.message}")
            return ResolveResult(company=company, query=query)
        except Exception as e:
            logger.error(f"Unexpected error resolving '{company}': {e}")
            return ResolveResult(company=company, query=query)

        if website:
            logger.info(f"Resolved '{company}' -> {website}")
        else:
            logger.info(f"No website found for '{company}'")
        return ResolveResult(company=company, website=website, query=query)
