"""
Renderer-side tool bodies.

``PageToolExecutor`` plays the part of the page renderer: it owns the loaded
document, runs the requested tool against it and answers every request with
exactly one ``ToolResponse``. Failures become error responses, never silence.
"""
from __future__ import annotations

import inspect
import re
from typing import Awaitable, Callable, Dict, List, Optional, Union
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from browser_agent.bridge.channel import RemoteExecutor
from browser_agent.models import ToolRequest, ToolResponse

from utils.logger import get_logger

logger = get_logger(__name__)

PRICE_PATTERNS = (
    re.compile(r"\$\d+(?:\.\d{2})?"),
    re.compile(r"\d+(?:\.\d{2})?\s*(?:USD|dollars?)", re.IGNORECASE),
    re.compile(r"\d+(?:\.\d{2})?\s*€"),
    re.compile(r"£\d+(?:\.\d{2})?"),
    re.compile(r"\d+(?:\.\d{2})?\s*(?:EUR|GBP)", re.IGNORECASE),
)
MAX_PRICES = 10
MAX_SEARCH_MATCHES = 5
DEFAULT_CLICK_SELECTOR = 'button, input[type="button"], input[type="submit"], a'
NO_CONTENT = "No page content available"

ToolBody = Callable[[Optional[str]], Union[str, Awaitable[str]]]


def normalize_url(url: str) -> str:
    url = url.strip()
    return url if url.startswith(("http://", "https://")) else f"https://{url}"


class PageDocument:
    """A loaded page: its URL, the parsed DOM and its visible text lines."""

    def __init__(self, url: str, html: str) -> None:
        self.url = url
        self.html = html
        self.soup = BeautifulSoup(html, "html.parser")

        text_soup = BeautifulSoup(html, "html.parser")
        for hidden in text_soup(["script", "style", "noscript", "template", "head"]):
            hidden.decompose()
        body = text_soup.body or text_soup
        self.lines: List[str] = [line.strip() for line in body.get_text("\n").split("\n") if line.strip()]

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


class PageToolExecutor(RemoteExecutor):
    """Executes browser tools against the current :class:`PageDocument`."""

    def __init__(
        self,
        document: Optional[PageDocument] = None,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
        fetch_timeout: float = 10.0,
    ) -> None:
        self.document = document
        self._http = http_client
        self._fetch_timeout = fetch_timeout
        self._tools: Dict[str, ToolBody] = {
            "extract_prices": self.extract_prices,
            "search_dom": self.search_dom,
            "scrape_table": self.scrape_table,
            "click_button": self.click_button,
            "navigate_to": self.navigate_to,
        }

    @property
    def current_url(self) -> Optional[str]:
        return self.document.url if self.document else None

    async def handle(self, request: ToolRequest) -> ToolResponse:
        tool = self._tools.get(request.tool_name)
        if tool is None:
            logger.warning("page_tool_unknown", tool=request.tool_name, correlation_id=request.correlation_id)
            return ToolResponse(
                correlation_id=request.correlation_id,
                error=f"Error: Unknown tool '{request.tool_name}'",
                error_kind="tool_not_found",
            )

        try:
            result = tool(request.argument)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            logger.error("page_tool_failed", tool=request.tool_name, correlation_id=request.correlation_id, error=str(exc))
            return ToolResponse(
                correlation_id=request.correlation_id,
                error=f"Error executing {request.tool_name}: {exc}",
                error_kind="execution_error",
            )

        logger.debug("page_tool_executed", tool=request.tool_name, correlation_id=request.correlation_id)
        return ToolResponse(correlation_id=request.correlation_id, result=result)

    async def load(self, url: str) -> PageDocument:
        """Fetch ``url`` and make it the current document."""
        url = normalize_url(url)
        if self._http is not None:
            response = await self._http.get(url)
        else:
            async with httpx.AsyncClient(follow_redirects=True, timeout=self._fetch_timeout) as client:
                response = await client.get(url)
        response.raise_for_status()
        self.document = PageDocument(str(response.url), response.text)
        logger.info("page_loaded", url=self.document.url, lines=len(self.document.lines))
        return self.document

    # ----------------------------- Tools ---------------------------------

    def extract_prices(self, argument: Optional[str] = None) -> str:
        if self.document is None:
            return NO_CONTENT
        found: Dict[str, None] = {}
        for pattern in PRICE_PATTERNS:
            for match in pattern.findall(self.document.text):
                found.setdefault(match.strip(), None)
        if not found:
            return "No prices found on this page"
        prices = list(found)[:MAX_PRICES]
        return f"Found {len(found)} prices:\n{', '.join(prices)}"

    def search_dom(self, argument: Optional[str] = None) -> str:
        if self.document is None:
            return NO_CONTENT
        keyword = argument or "content"
        needle = keyword.lower()
        matches = [line for line in self.document.lines if needle in line.lower()]
        if not matches:
            return f'No matches found for "{keyword}". Page contains {len(self.document.lines)} lines of text.'
        shown = "\n".join(matches[:MAX_SEARCH_MATCHES])
        return f'Found {len(matches)} matches for "{keyword}":\n\n{shown}'

    def scrape_table(self, argument: Optional[str] = None) -> str:
        if self.document is None:
            return NO_CONTENT
        table = self.document.soup.find("table")
        if table is None:
            return "No tables found on this page"
        rows = table.find_all("tr")
        if not rows:
            return "Table found but no rows detected"
        data = [
            " | ".join(cell.get_text().strip() for cell in row.find_all(["td", "th"]))
            for row in rows
        ]
        data = [row for row in data if row]
        return f"Table data extracted ({len(data)} rows):\n\n" + "\n".join(data)

    async def click_button(self, argument: Optional[str] = None) -> str:
        if self.document is None:
            return NO_CONTENT
        selector = argument or DEFAULT_CLICK_SELECTOR
        element = self.document.soup.select_one(selector)
        if element is None:
            return f"No clickable elements found matching selector: {selector}"

        label = element.name
        if element.get("id"):
            label += f"#{element['id']}"
        if element.get("class"):
            label += "." + ".".join(element["class"])

        href = element.get("href") if element.name == "a" else None
        if href and not href.startswith(("#", "javascript:")):
            await self.load(urljoin(self.document.url, href))
        return f"Successfully clicked element: {label}"

    async def navigate_to(self, argument: Optional[str] = None) -> str:
        if not argument or not argument.strip():
            return "Error: No URL provided"
        document = await self.load(argument)
        return f"Successfully navigated to: {document.url}"
