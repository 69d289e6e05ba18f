"""Data models for search result extraction."""
from pydantic import BaseModel, Field


class LinkCandidate(BaseModel):
    """An anchor extracted from a rendered search results page."""
    text: str = Field(default="", description="Visible anchor text")
    href: str = Field(default="", description="Resolved anchor href")


class ResolveResult(BaseModel):
    """Outcome of resolving one company name."""
    company: str = Field(..., description="Company name as ingested")
    website: str = Field(default="", description="Selected website, empty when nothing was found")
    query: str = Field(default="", description="Sanitized query that was searched")

    @property
    def succeeded(self) -> bool:
        return bool(self.website)
