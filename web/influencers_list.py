"""
Influencer list view.

InfluencersList holds the page state (result set, loading/error flags,
search term and status filter), fetches from GET /api/influencers over an
httpx.AsyncClient, and renders the current state to HTML.

Editing the search term or the status filter never fetches by itself; only
search(), key_press("Enter") and retry() do.
"""
from pathlib import Path
from typing import Any, Optional

import httpx
from jinja2 import Environment, FileSystemLoader, select_autoescape

from lib.logging import get_logger
from web.formatting import format_currency, format_date, format_number, status_color

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).parent / "templates"
LIST_ENDPOINT = "/api/influencers"
PAGE_SIZE = 50

STATUS_OPTIONS = [
    ("", "All Status"),
    ("active", "Active"),
    ("inactive", "Inactive"),
    ("suspended", "Suspended"),
]

FETCH_FAILED = "Failed to fetch influencers"
NETWORK_ERROR = "Network error occurred"

templates = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)
templates.filters["currency"] = format_currency
templates.filters["joined"] = format_date
templates.filters["number"] = format_number
templates.filters["status_color"] = status_color


class InfluencersList:
    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        initial_data: Optional[list[dict[str, Any]]] = None,
        page_size: int = PAGE_SIZE,
        endpoint: str = LIST_ENDPOINT,
    ):
        self.client = client
        self.endpoint = endpoint
        self.page_size = page_size
        # An empty list still counts as seeded
        self.initial_data = initial_data
        self.influencers: list[dict[str, Any]] = list(initial_data or [])
        self.loading = initial_data is None
        self.error: Optional[str] = None
        self.search_term = ""
        self.status_filter = ""

    @property
    def seeded(self) -> bool:
        return self.initial_data is not None

    async def mount(self):
        """First render: fetch once unless seeded"""
        if not self.seeded:
            await self.fetch()

    def query_params(self) -> dict[str, str]:
        params = {"limit": str(self.page_size)}
        if self.search_term:
            params["search"] = self.search_term
        if self.status_filter:
            params["status"] = self.status_filter
        return params

    async def fetch(self):
        if self.client is None:
            raise RuntimeError("InfluencersList has no HTTP client to fetch with")

        self.loading = True
        self.error = None
        try:
            response = await self.client.get(self.endpoint, params=self.query_params())
            result = response.json()
            if not isinstance(result, dict):
                raise ValueError(f"Unexpected response body: {type(result).__name__}")

            if result.get("status") == "success":
                self.influencers = result.get("data") or []
            else:
                self.error = result.get("message") or FETCH_FAILED
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Fetch error: {e}")
            self.error = NETWORK_ERROR
        finally:
            self.loading = False

    # User interactions

    def set_search_term(self, value: str):
        self.search_term = value

    def set_status_filter(self, value: str):
        self.status_filter = value

    async def key_press(self, key: str):
        if key == "Enter":
            await self.search()

    async def search(self):
        await self.fetch()

    async def retry(self):
        await self.fetch()

    # Rendering

    @property
    def show_spinner(self) -> bool:
        return self.loading and not self.seeded

    def context(self) -> dict[str, Any]:
        return {
            "influencers": self.influencers,
            "error": self.error,
            "show_spinner": self.show_spinner,
            "search_term": self.search_term,
            "status_filter": self.status_filter,
            "status_options": STATUS_OPTIONS,
        }

    def render(self) -> str:
        return templates.get_template("influencers_list.html").render(**self.context())
