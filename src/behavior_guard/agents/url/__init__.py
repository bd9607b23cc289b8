"""URL Analyzer - module init."""

from behavior_guard.agents.url.agent import UrlAnalyzer, parse_host

__all__ = ["UrlAnalyzer", "parse_host"]
