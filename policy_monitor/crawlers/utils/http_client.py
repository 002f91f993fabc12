from __future__ import annotations

import asyncio
import logging

import httpx

from policy_monitor.config import settings

logger = logging.getLogger(__name__)

# Desktop browser navigation headers; several gov.in hosts reject bare clients
_BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
    "Accept-Encoding": "gzip, deflate, br",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
    "Sec-Fetch-Dest": "document",
    "Sec-Fetch-Mode": "navigate",
    "Sec-Fetch-Site": "none",
    "Cache-Control": "max-age=0",
}


class FetchError(Exception):
    """Raised when a URL could not be fetched after all retries.

    ``kind`` is one of: dns, connection_refused, timeout, forbidden,
    not_found, too_small, generic.
    """

    def __init__(self, kind: str, url: str, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.url = url


class _TooSmallError(Exception):
    pass


def _classify_error(exc: Exception, url: str) -> FetchError:
    """Map the last attempt's exception to a labeled FetchError."""
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        if status == 403:
            return FetchError("forbidden", url, f"Access forbidden (403) for {url}")
        if status == 404:
            return FetchError("not_found", url, f"Page not found (404) for {url}")
        return FetchError("generic", url, f"Failed to fetch {url}: HTTP {status}")
    if isinstance(exc, httpx.TimeoutException):
        return FetchError("timeout", url, f"Request timeout for {url}")
    if isinstance(exc, httpx.ConnectError):
        text = str(exc).lower()
        if "name or service not known" in text or "nodename nor servname" in text \
                or "getaddrinfo" in text or "name resolution" in text:
            return FetchError("dns", url, f"DNS resolution failed for {url}")
        if "refused" in text:
            return FetchError("connection_refused", url, f"Connection refused by {url}")
    if isinstance(exc, _TooSmallError):
        return FetchError("too_small", url, f"Response too small or empty for {url}")
    return FetchError("generic", url, f"Failed to fetch {url}: {exc}")


async def fetch_page(
    url: str,
    *,
    headers: dict[str, str] | None = None,
    timeout: float | None = None,
    max_retries: int | None = None,
    backoff_base: float | None = None,
    min_bytes: int | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> str:
    """Fetch a listing page with retry and linear backoff. Returns response text.

    A body shorter than *min_bytes* counts as a failed attempt even on HTTP 200
    (soft-404 pages). After attempt ``n`` fails the fetcher waits
    ``backoff_base * n`` seconds. Raises FetchError once retries are exhausted.
    """
    timeout = timeout if timeout is not None else settings.FETCH_TIMEOUT
    max_retries = max_retries if max_retries is not None else settings.FETCH_MAX_RETRIES
    backoff_base = backoff_base if backoff_base is not None else settings.FETCH_BACKOFF_BASE
    min_bytes = min_bytes if min_bytes is not None else settings.FETCH_MIN_BYTES

    merged_headers = dict(_BROWSER_HEADERS)
    if headers:
        merged_headers.update(headers)

    last_exc: Exception | None = None
    async with httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        max_redirects=settings.FETCH_MAX_REDIRECTS,
        transport=transport,
    ) as client:
        for attempt in range(1, max_retries + 1):
            logger.debug("Attempt %d/%d for %s", attempt, max_retries, url)
            try:
                response = await client.get(url, headers=merged_headers)
                response.raise_for_status()
                if len(response.content) <= min_bytes:
                    raise _TooSmallError(f"{len(response.content)} bytes")
                logger.info("Fetched %d characters from %s", len(response.text), url)
                return response.text
            except (httpx.HTTPStatusError, httpx.RequestError, _TooSmallError) as e:
                last_exc = e
                logger.warning(
                    "Request failed (attempt %d/%d) for %s: %s",
                    attempt, max_retries, url, e,
                )
                if attempt < max_retries:
                    await asyncio.sleep(backoff_base * attempt)

    raise _classify_error(last_exc, url)  # type: ignore[arg-type]


def candidate_urls(base_url: str, primary_path: str | None, fallback_paths: list[str]) -> list[str]:
    """Build the ordered URL variants for a site: configured path, conventional paths, root."""
    root = base_url.rstrip("/")
    urls: list[str] = []
    for path in [primary_path, *fallback_paths]:
        if path:
            urls.append(root + (path if path.startswith("/") else "/" + path))
    urls.append(root)

    seen: set[str] = set()
    ordered: list[str] = []
    for url in urls:
        if url not in seen:
            seen.add(url)
            ordered.append(url)
    return ordered
