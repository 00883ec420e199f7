import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import aiohttp

from app.core.config import settings


class PccAPIError(Exception):
    """Raised when the procurement API keeps failing after all retries"""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class PccClient:
    """
    Client for the public procurement (PCC) API.

    Every call waits a fixed delay first to stay under the API's rate limit.
    Failed calls (non-2xx or network error) are retried with exponential
    backoff. All non-2xx statuses are retried alike.
    """

    def __init__(self, base_url: Optional[str] = None, logger=None, sleep=None,
                 request_delay: Optional[float] = None, max_retry_count: Optional[int] = None,
                 retry_delay: Optional[float] = None, backoff_factor: Optional[float] = None):
        self.base_url = (base_url or settings.PCC_API_BASE_URL).rstrip("/")
        self.logger = logger or logging.getLogger(__name__)
        self.sleep = sleep or asyncio.sleep
        self.request_delay = request_delay if request_delay is not None else settings.PCC_REQUEST_DELAY_MS / 1000
        self.max_retry_count = max_retry_count if max_retry_count is not None else settings.PCC_MAX_RETRY_COUNT
        self.retry_delay = retry_delay if retry_delay is not None else settings.PCC_RETRY_DELAY_MS / 1000
        self.backoff_factor = backoff_factor if backoff_factor is not None else settings.PCC_BACKOFF_FACTOR
        self.timeout = aiohttp.ClientTimeout(total=settings.PCC_REQUEST_TIMEOUT_SECONDS)

    def backoff_delay(self, retry_count: int) -> float:
        """Seconds to wait before retry number retry_count + 1"""
        return self.retry_delay * (self.backoff_factor ** retry_count)

    async def _request(self, url: str, params: Dict[str, Any]) -> Tuple[int, Any]:
        """Single GET; returns (status, decoded JSON body or None)"""
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.get(url, params=params) as response:
                if 200 <= response.status < 300:
                    return response.status, await response.json(content_type=None)
                return response.status, None

    async def fetch_with_retry(self, url: str, params: Optional[Dict[str, Any]] = None,
                               retry_count: int = 0) -> Any:
        """
        GET a JSON document, retrying on failure.

        Args:
            url: Absolute URL
            params: Query string parameters
            retry_count: Retries already spent on this call

        Returns:
            The decoded JSON body

        Raises:
            PccAPIError: After max_retry_count retries have failed
        """
        await self.sleep(self.request_delay)

        status = None
        try:
            status, payload = await self._request(url, params or {})
            if status is not None and 200 <= status < 300:
                return payload
            reason = f"HTTP error! status: {status}"
        except (aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            reason = f"{type(e).__name__}: {e}"

        if retry_count >= self.max_retry_count:
            self.logger.error(f"Giving up on {url} after {retry_count} retries: {reason}")
            raise PccAPIError(f"Request to {url} failed: {reason}", status=status)

        delay = self.backoff_delay(retry_count)
        self.logger.warning(f"Request to {url} failed ({reason}), retry {retry_count + 1}/{self.max_retry_count} in {delay:.2f}s")
        await self.sleep(delay)
        return await self.fetch_with_retry(url, params, retry_count + 1)

    @staticmethod
    def _records(payload: Any) -> List[Dict[str, Any]]:
        if isinstance(payload, dict) and isinstance(payload.get("records"), list):
            return payload["records"]
        return []

    async def search_tenders(self, keyword: str) -> List[Dict[str, Any]]:
        """Title search; returns the API's records (one per tender announcement)"""
        payload = await self.fetch_with_retry(f"{self.base_url}/searchbytitle", {"query": keyword})
        records = self._records(payload)
        if not records:
            self.logger.warning(f"No records in search response for '{keyword}'")
        return records

    async def fetch_tender_history(self, unit_id: str, job_number: str) -> List[Dict[str, Any]]:
        """All published records (versions) of one tender"""
        payload = await self.fetch_with_retry(
            f"{self.base_url}/tender",
            {"unit_id": unit_id, "job_number": job_number}
        )
        records = self._records(payload)
        if not records:
            self.logger.warning(f"No records in history for unit_id={unit_id} job_number={job_number}")
        return records


def get_pcc_client() -> PccClient:
    """FastAPI dependency; overridden in tests"""
    return PccClient()
