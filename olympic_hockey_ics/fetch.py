"""Schedule page fetching: plain HTTP first, headless browser as a last resort."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from olympic_hockey_ics import FetchError

LOGGER = logging.getLogger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,application/json;q=0.8,*/*;q=0.7",
    "Accept-Language": "en-US,en;q=0.9",
}
TIMEOUT = 30


@dataclass
class FetchResult:
    body: str
    url: str
    is_json: bool = False


def build_session() -> requests.Session:
    session = requests.Session()
    retry = Retry(
        total=3,
        connect=3,
        read=3,
        status=3,
        backoff_factor=1.0,
        status_forcelist=[408, 429, 500, 502, 503, 504],
        allowed_methods=["GET", "HEAD"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    return session


def _looks_like_json(content_type: str, body: str) -> bool:
    if "json" in content_type.lower():
        return True
    return body.lstrip().startswith("[")


def fetch_url(url: str, session: requests.Session) -> FetchResult:
    """Fetch one URL with browser-like headers. Raises on HTTP errors."""
    LOGGER.info("Fetching %s", url)
    response = session.get(url, headers=HEADERS, timeout=TIMEOUT)
    LOGGER.info("HTTP %s for %s", response.status_code, url)
    response.raise_for_status()
    body = response.text
    content_type = response.headers.get("Content-Type", "")
    return FetchResult(body=body, url=url, is_json=_looks_like_json(content_type, body))


def render_url(url: str) -> FetchResult:
    """Render a script-heavy page in headless Chromium and return its HTML."""
    from playwright.sync_api import sync_playwright

    LOGGER.info("Rendering %s in headless browser", url)
    with sync_playwright() as pw:
        browser = pw.chromium.launch(
            headless=True,
            args=["--no-sandbox", "--disable-setuid-sandbox"],
        )
        try:
            page = browser.new_page(user_agent=USER_AGENT)
            page.goto(url, wait_until="networkidle", timeout=TIMEOUT * 1000)
            # lazy-loaded schedule widgets
            page.wait_for_timeout(2000)
            html = page.content()
        finally:
            browser.close()
    LOGGER.info("Rendered %d bytes from %s", len(html), url)
    return FetchResult(body=html, url=url)


def fetch_schedule(
    urls: Iterable[str],
    session: requests.Session | None = None,
    use_browser: bool = True,
) -> FetchResult:
    """Return the first schedule body any source yields.

    Every URL is tried with a plain request before any browser render.
    Raises :class:`FetchError` when all attempts fail.
    """
    urls = list(urls)
    if not urls:
        raise FetchError("No source URLs configured")
    session = session or build_session()
    last_error: Exception | None = None

    for url in urls:
        try:
            return fetch_url(url, session)
        except requests.RequestException as exc:
            LOGGER.warning("Failed to fetch %s: %s", url, exc)
            last_error = exc

    if use_browser:
        LOGGER.info("Plain fetch failed for every source, trying headless browser")
        for url in urls:
            try:
                return render_url(url)
            except ImportError as exc:
                LOGGER.warning("Headless browser unavailable (install the 'browser' extra): %s", exc)
                last_error = exc
                break
            except Exception as exc:
                LOGGER.warning("Browser render failed for %s: %s", url, exc)
                last_error = exc

    raise FetchError(f"Failed to fetch from all sources. Last error: {last_error}")
