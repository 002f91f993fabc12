"""Tests for the listing-page fetcher."""
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from policy_monitor.crawlers.utils.http_client import FetchError, candidate_urls, fetch_page

URL = "https://awbi.gov.in/circulars"
BIG_BODY = "<html>" + "x" * 2000 + "</html>"


def _transport(*outcomes):
    """MockTransport replaying *outcomes* in order (last one repeats).

    Each outcome is an httpx.Response or an exception factory taking the request.
    """
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        outcome = outcomes[min(len(calls), len(outcomes)) - 1]
        if callable(outcome):
            raise outcome(request)
        return outcome

    return httpx.MockTransport(handler), calls


@pytest.fixture
def no_sleep():
    with patch("policy_monitor.crawlers.utils.http_client.asyncio.sleep", new=AsyncMock()) as sleep:
        yield sleep


@pytest.mark.asyncio
async def test_fetch_success_first_attempt(no_sleep):
    transport, calls = _transport(httpx.Response(200, text=BIG_BODY))

    html = await fetch_page(URL, transport=transport)

    assert html == BIG_BODY
    assert len(calls) == 1
    assert calls[0].headers["User-Agent"].startswith("Mozilla/5.0")
    no_sleep.assert_not_awaited()


@pytest.mark.asyncio
async def test_fetch_recovers_after_server_error(no_sleep):
    transport, calls = _transport(httpx.Response(500), httpx.Response(200, text=BIG_BODY))

    html = await fetch_page(URL, transport=transport, backoff_base=2.0)

    assert html == BIG_BODY
    assert len(calls) == 2
    no_sleep.assert_awaited_once_with(2.0)


@pytest.mark.asyncio
async def test_small_body_is_failure_with_linear_backoff(no_sleep):
    transport, calls = _transport(httpx.Response(200, content=b"x" * 1000))

    with pytest.raises(FetchError) as exc_info:
        await fetch_page(URL, transport=transport, max_retries=3, backoff_base=2.0, min_bytes=1000)

    assert exc_info.value.kind == "too_small"
    assert len(calls) == 3
    assert [c.args[0] for c in no_sleep.await_args_list] == [2.0, 4.0]


@pytest.mark.asyncio
async def test_body_just_over_threshold_is_accepted(no_sleep):
    body = "y" * 1001
    transport, _ = _transport(httpx.Response(200, text=body))

    assert await fetch_page(URL, transport=transport, min_bytes=1000) == body


@pytest.mark.asyncio
@pytest.mark.parametrize("status,kind", [(403, "forbidden"), (404, "not_found"), (503, "generic")])
async def test_http_status_classification(no_sleep, status, kind):
    transport, calls = _transport(httpx.Response(status))

    with pytest.raises(FetchError) as exc_info:
        await fetch_page(URL, transport=transport, max_retries=2)

    assert exc_info.value.kind == kind
    assert exc_info.value.url == URL
    assert len(calls) == 2


@pytest.mark.asyncio
async def test_dns_failure_classification(no_sleep):
    transport, _ = _transport(
        lambda req: httpx.ConnectError("[Errno -2] Name or service not known", request=req),
    )

    with pytest.raises(FetchError) as exc_info:
        await fetch_page(URL, transport=transport, max_retries=1)

    assert exc_info.value.kind == "dns"


@pytest.mark.asyncio
async def test_timeout_classification(no_sleep):
    transport, _ = _transport(lambda req: httpx.ReadTimeout("timed out", request=req))

    with pytest.raises(FetchError) as exc_info:
        await fetch_page(URL, transport=transport, max_retries=1)

    assert exc_info.value.kind == "timeout"


def test_candidate_urls_order_and_dedup():
    urls = candidate_urls("https://moef.gov.in/", "/consultations/", ["/consultations/", "policies/"])

    assert urls == [
        "https://moef.gov.in/consultations/",
        "https://moef.gov.in/policies/",
        "https://moef.gov.in",
    ]


def test_candidate_urls_without_primary_path():
    assert candidate_urls("https://awbi.gov.in", None, []) == ["https://awbi.gov.in"]
