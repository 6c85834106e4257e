import json
import logging
import os

import httpx

from dubai_unit_finder.errors import BotBlockDetected, NetworkError, UpstreamHttpError
from dubai_unit_finder.normalize import encode_data_uri


logger = logging.getLogger("duf.http")

DESKTOP_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
)

BOT_BLOCK_INDICATORS = (
    "cf-browser-verification",
    "Attention Required! | Cloudflare",
    "Please verify you are a human",
    "Just a moment...",
)

_PROXY_LOOKUP_OFF = (
    ("NO_PROXY_LOOKUP", "1"),
    ("CI", "1"),
    ("CODESPACES", "true"),
)


def build_desktop_headers(referer=None):
    headers = {
        "User-Agent": DESKTOP_USER_AGENT,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "Connection": "keep-alive",
        "Upgrade-Insecure-Requests": "1",
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "none",
        "Sec-Fetch-User": "?1",
    }
    if referer:
        headers["Referer"] = referer
    return headers


def proxy_lookup_enabled(environ=None):
    """False when any marker in `_PROXY_LOOKUP_OFF` is set (CI sandboxes, Codespaces)."""
    environ = os.environ if environ is None else environ
    return not any(environ.get(name) == value for name, value in _PROXY_LOOKUP_OFF)


def looks_like_bot_block(text):
    lowered = (text or "").lower()
    return any(indicator.lower() in lowered for indicator in BOT_BLOCK_INDICATORS)


class BrowserHttpClient:
    """Single-shot GETs with a desktop browser header profile.

    Every call issues exactly one request bounded by its own timeout; there
    is no retry. One underlying httpx client is shared by all calls, so
    concurrent pipelines on the same instance reuse connections.
    """

    def __init__(self, transport=None):
        self._transport = transport
        self._client = None

    async def _ensure_client(self):
        if self._client is not None:
            return self._client
        self._client = httpx.AsyncClient(
            follow_redirects=True,
            trust_env=proxy_lookup_enabled(),
            transport=self._transport,
        )
        return self._client

    async def aclose(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        await self._ensure_client()
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def request(self, url, timeout, headers=None):
        client = await self._ensure_client()
        try:
            response = await client.get(
                url, headers=headers or build_desktop_headers(), timeout=timeout
            )
        except httpx.TimeoutException as exc:
            raise NetworkError(f"Request to {url} timed out after {timeout}s") from exc
        except httpx.HTTPError as exc:
            raise NetworkError(f"Failed to fetch {url}: {exc}") from exc
        except httpx.InvalidURL as exc:
            raise NetworkError(f"Invalid request URL {url!r}: {exc}") from exc
        return {
            "text": response.text,
            "content": response.content,
            "status": response.status_code,
            "final_url": str(response.url),
            "content_type": response.headers.get("Content-Type", ""),
        }

    async def fetch_page(self, url, timeout):
        """Fetch a listing page and reject upstream errors and bot challenges."""
        response = await self.request(url, timeout)
        status = response["status"]
        if status >= 400:
            logger.info("upstream error status=%s url=%s", status, url)
            raise UpstreamHttpError(status)
        if looks_like_bot_block(response["text"]):
            logger.info("bot challenge detected url=%s", url)
            raise BotBlockDetected(
                "Bot protection detected (Cloudflare or similar). "
                "A headful browser or proxy may be required."
            )
        return response

    async def fetch_json(self, url, timeout):
        """GET a JSON document; None on any failure."""
        try:
            response = await self.request(url, timeout)
        except NetworkError as exc:
            logger.info("json endpoint unavailable url=%s error=%s", url, exc)
            return None
        if response["status"] >= 400:
            logger.info("json endpoint status=%s url=%s", response["status"], url)
            return None
        try:
            return json.loads(response["text"])
        except (ValueError, RecursionError):
            logger.info("json endpoint returned invalid JSON url=%s", url)
            return None

    async def fetch_image_data_uri(self, image_url, referer, timeout):
        """Download an image as a base64 data URI; None on any failure."""
        try:
            response = await self.request(
                image_url, timeout, headers=build_desktop_headers(referer=referer)
            )
        except NetworkError as exc:
            logger.info("image fetch failed url=%s error=%s", image_url, exc)
            return None
        if response["status"] >= 400:
            logger.info("image fetch status=%s url=%s", response["status"], image_url)
            return None
        return encode_data_uri(response["content"], response["content_type"])
