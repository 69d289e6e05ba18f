"""Company website finder: resolve company names to official websites via web search."""

__version__ = "1.0.0"
