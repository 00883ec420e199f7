# tests/test_pcc_client.py

import pytest
import aiohttp
from unittest.mock import AsyncMock, patch

from app.modules.search.client import PccClient, PccAPIError

BASE_URL = "https://pcc.example.test/api"


@pytest.fixture
def sleep():
    return AsyncMock()


@pytest.fixture
def pcc(sleep):
    return PccClient(
        base_url=BASE_URL,
        sleep=sleep,
        request_delay=0.5,
        max_retry_count=3,
        retry_delay=1.5,
        backoff_factor=1.5
    )


def slept(sleep):
    return [call.args[0] for call in sleep.await_args_list]


@pytest.mark.asyncio
async def test_success_waits_request_delay_once(pcc, sleep):
    with patch.object(pcc, "_request", AsyncMock(return_value=(200, {"records": []}))) as request:
        payload = await pcc.fetch_with_retry(f"{BASE_URL}/tender", {"unit_id": "A"})

    assert payload == {"records": []}
    assert slept(sleep) == [0.5]
    request.assert_awaited_once_with(f"{BASE_URL}/tender", {"unit_id": "A"})

@pytest.mark.asyncio
async def test_retries_with_exponential_backoff_then_succeeds(pcc, sleep):
    responses = [(500, None), (404, None), (200, {"records": [{"date": 20240101}]})]
    with patch.object(pcc, "_request", AsyncMock(side_effect=responses)) as request:
        payload = await pcc.fetch_with_retry(f"{BASE_URL}/searchbytitle", {"query": "道路"})

    assert payload["records"][0]["date"] == 20240101
    assert request.await_count == 3
    assert slept(sleep) == [0.5, 1.5, 0.5, 2.25, 0.5]

@pytest.mark.asyncio
async def test_gives_up_after_max_retries(pcc, sleep):
    with patch.object(pcc, "_request", AsyncMock(return_value=(503, None))) as request:
        with pytest.raises(PccAPIError) as excinfo:
            await pcc.fetch_with_retry(f"{BASE_URL}/tender")

    # First attempt plus three retries
    assert request.await_count == 4
    assert slept(sleep) == [0.5, 1.5, 0.5, 2.25, 0.5, 3.375, 0.5]
    assert excinfo.value.status == 503

@pytest.mark.asyncio
async def test_network_errors_are_retried(pcc, sleep):
    responses = [aiohttp.ClientConnectionError("reset"), (200, {"records": []})]
    with patch.object(pcc, "_request", AsyncMock(side_effect=responses)) as request:
        await pcc.fetch_with_retry(f"{BASE_URL}/tender")

    assert request.await_count == 2
    assert slept(sleep) == [0.5, 1.5, 0.5]

@pytest.mark.asyncio
async def test_search_tenders_returns_records(pcc):
    records = [{"unit_id": "A.1", "job_number": "J1"}]
    with patch.object(pcc, "_request", AsyncMock(return_value=(200, {"records": records}))) as request:
        result = await pcc.search_tenders("道路")

    assert result == records
    request.assert_awaited_once_with(f"{BASE_URL}/searchbytitle", {"query": "道路"})

@pytest.mark.asyncio
async def test_history_without_records_is_empty(pcc):
    with patch.object(pcc, "_request", AsyncMock(return_value=(200, {"unexpected": True}))) as request:
        result = await pcc.fetch_tender_history("A.1", "J1")

    assert result == []
    request.assert_awaited_once_with(f"{BASE_URL}/tender", {"unit_id": "A.1", "job_number": "J1"})

def test_backoff_delay(pcc):
    assert [pcc.backoff_delay(n) for n in range(3)] == [1.5, 2.25, 3.375]
