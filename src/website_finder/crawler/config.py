"""
Configuration models for the search crawler.
"""
from typing import List
from pydantic import BaseModel, Field
from enum import Enum

from ..core.config import settings


class WaitStrategy(str, Enum):
    """Page load wait strategies."""
    NETWORKIDLE = "networkidle"
    DOMCONTENTLOADED = "domcontentloaded"
    LOAD = "load"


class SearchConfig(BaseModel):
    """Configuration for resolving a company through a search engine."""
    search_url_template: str = Field(
        default="https://www.bing.com/search?q={query}",
        description="Search URL with a {query} placeholder"
    )
    link_selectors: List[str] = Field(
        default_factory=lambda: ["h2 > a", ".b_algo h2 a"],
        min_length=1,
        description="Result anchor selectors, primary first"
    )
    blocked_domains: List[str] = Field(
        default_factory=lambda: [
            "linkedin.com",
            "bloomberg.com",
            "zaubacorp.com",
            "dnb.com",
            "sgpbusiness.com",
        ],
        description="Domains never accepted as a company website"
    )
    wait_until: WaitStrategy = Field(
        default=WaitStrategy.DOMCONTENTLOADED,
        description="Wait strategy for search page navigation"
    )
    navigation_timeout_ms: int = Field(
        default=20000,
        ge=1,
        description="Navigation timeout in milliseconds"
    )
    selector_timeout_ms: int = Field(
        default=10000,
        ge=0,
        description="Result selector wait timeout in milliseconds"
    )
    min_fallback_token_length: int = Field(
        default=4,
        ge=1,
        description="Shortest first token worth a simplified retry query"
    )

    @classmethod
    def from_settings(cls) -> "SearchConfig":
        """Build the search configuration from application settings."""
        return cls(
            search_url_template=settings.SEARCH_URL_TEMPLATE,
            link_selectors=settings.RESULT_LINK_SELECTORS,
            blocked_domains=settings.BLOCKED_DOMAINS,
            navigation_timeout_ms=settings.NAVIGATION_TIMEOUT_MS,
            selector_timeout_ms=settings.SELECTOR_TIMEOUT_MS,
        )
