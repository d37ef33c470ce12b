"""
Web plugins.

`web_search` performs a live search and `web_reader` fetches a page's
content. Both delegate the actual retrieval to a swappable provider
object, so tests and alternative backends can replace the HTTP layer.
The default providers use the `requests` library; their blocking calls
run in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import os
import re
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Mapping, Optional

import requests

from aiplugin.plugins.base import (
    ParameterSpec,
    ParameterType,
    Plugin,
    PluginResult,
    get_parameter,
)

logger = logging.getLogger(__name__)

MAX_SEARCH_RESULTS = 10


@dataclass
class SearchResult:
    """A single search hit."""

    title: str
    url: str
    snippet: str = ""
    date: Optional[str] = None
    source: Optional[str] = None


class SearchProvider:
    """Performs web searches. Subclasses implement `search`."""

    def search(self, query: str, options: Optional[Dict[str, Any]] = None) -> List[SearchResult]:
        raise NotImplementedError


class ContentProvider:
    """Fetches web page content. Subclasses implement `fetch`."""

    def fetch(self, url: str, options: Optional[Dict[str, Any]] = None) -> str:
        raise NotImplementedError


class DefaultWebSearchProvider(SearchProvider):
    """
    Query a configurable JSON search API over HTTP.

    The API is called with `q` and `count` query parameters (plus `site`
    when filtering) and is expected to return results under `results`,
    `data` or `web.results`, each with a title, URL and snippet.
    """

    def __init__(self, endpoint: str, api_key: str = "", timeout: float = 15) -> None:
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = timeout

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "DefaultWebSearchProvider":
        endpoint = cfg.get("endpoint") or os.getenv("SEARCH_API_ENDPOINT", "")
        if not endpoint:
            raise RuntimeError(
                "web_search requires SEARCH_API_ENDPOINT env var or plugins.web_search.endpoint in config."
            )
        api_key = os.getenv(cfg.get("api_key_env", "SEARCH_API_KEY"), "")
        return cls(endpoint=endpoint, api_key=api_key, timeout=float(cfg.get("timeout", 15)))

    def search(self, query: str, options: Optional[Dict[str, Any]] = None) -> List[SearchResult]:
        options = options or {}
        count = int(options.get("count", 3))
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        params: Dict[str, Any] = {"q": query, "count": count}
        if options.get("site"):
            params["site"] = options["site"]

        logger.debug("Searching %s for %r", self.endpoint, query)
        resp = requests.get(self.endpoint, params=params, headers=headers, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()

        raw_results = data.get("results") or data.get("data") or (data.get("web") or {}).get("results") or []
        results: List[SearchResult] = []
        for r in raw_results[:count]:
            results.append(
                SearchResult(
                    title=r.get("title") or r.get("name") or "Untitled",
                    url=r.get("url") or r.get("link") or "",
                    snippet=r.get("snippet") or r.get("description") or "",
                    date=r.get("date") or r.get("age"),
                    source=r.get("source") or r.get("domain"),
                )
            )
        return results


_SCRIPT_RE = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE_RE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_COMMENT_RE = re.compile(r"<!--[\s\S]*?-->")


def clean_html(html: str) -> str:
    """Strip script blocks, style blocks and comments from HTML."""
    html = _SCRIPT_RE.sub("", html)
    html = _STYLE_RE.sub("", html)
    return _COMMENT_RE.sub("", html)


class DefaultWebContentProvider(ContentProvider):
    """
    Fetch pages with an HTTP GET.
    """

    def __init__(self, timeout: float = 15) -> None:
        self.timeout = timeout

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "DefaultWebContentProvider":
        return cls(timeout=float(cfg.get("timeout", 15)))

    def fetch(self, url: str, options: Optional[Dict[str, Any]] = None) -> str:
        options = options or {}
        logger.debug("Fetching content from %s", url)
        resp = requests.get(url, timeout=self.timeout)
        resp.raise_for_status()
        text = resp.text
        if options.get("clean_html"):
            text = clean_html(text)
        return text


class WebSearchPlugin(Plugin):
    """
    Perform a web search through a `SearchProvider`.
    """

    def __init__(self, provider: SearchProvider) -> None:
        super().__init__(
            name="web_search",
            description="Performs web searches using various search engines",
            parameters=[
                ParameterSpec("query", ParameterType.STRING, "Search query", required=True),
                ParameterSpec("count", ParameterType.INTEGER, "Number of results to return (max 10)", default=3),
                ParameterSpec("engine", ParameterType.STRING, "Search engine to use (brave, google, bing)", default="brave"),
                ParameterSpec("site", ParameterType.STRING, "Filter results to specific site or domain"),
            ],
        )
        self.provider = provider

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "WebSearchPlugin":
        return cls(provider=DefaultWebSearchProvider.from_config(cfg))

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        query = str(parameters["query"])
        count = int(get_parameter(parameters, "count", 3))
        if count > MAX_SEARCH_RESULTS:
            logger.warning("Requested count %d exceeds maximum of %d", count, MAX_SEARCH_RESULTS)
            count = MAX_SEARCH_RESULTS
        options: Dict[str, Any] = {
            "count": count,
            "engine": str(get_parameter(parameters, "engine", "brave")).lower(),
        }

        site = get_parameter(parameters, "site", "").strip()
        if site:
            options["site"] = site
            if site.lower() not in query.lower():
                query = f"{query} site:{site}"

        logger.info("web_search executing for query %r", query)
        results = await asyncio.to_thread(self.provider.search, query, options)
        return PluginResult.ok(
            [asdict(r) for r in results],
            f"Found {len(results)} results for '{query}'",
        )


class WebReaderPlugin(Plugin):
    """
    Read a web page through a `ContentProvider`.
    """

    def __init__(self, provider: ContentProvider) -> None:
        super().__init__(
            name="web_reader",
            description="Reads and extracts content from web pages",
            parameters=[
                ParameterSpec("url", ParameterType.STRING, "URL of the webpage to read", required=True),
                ParameterSpec("clean_html", ParameterType.BOOLEAN, "Whether to clean and format the HTML content", default=True),
                ParameterSpec("max_length", ParameterType.INTEGER, "Maximum content length to return (0 for unlimited)"),
            ],
        )
        self.provider = provider

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "WebReaderPlugin":
        return cls(provider=DefaultWebContentProvider.from_config(cfg))

    async def execute(self, parameters: Mapping[str, Any]) -> PluginResult:
        url = str(parameters["url"])
        max_length = int(get_parameter(parameters, "max_length", 0))
        options = {
            "clean_html": bool(get_parameter(parameters, "clean_html", True)),
            "max_length": max_length,
        }

        logger.info("web_reader executing for URL %s", url)
        content = await asyncio.to_thread(self.provider.fetch, url, options)
        if max_length > 0 and len(content) > max_length:
            content = content[:max_length] + "... (content truncated)"
        return PluginResult.ok(content, f"Successfully fetched content from {url}")
