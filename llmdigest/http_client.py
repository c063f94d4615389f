"""
HTTP client for platforms that expose JSON or markdown endpoints.

Handles:
- Browser-like headers to avoid trivial bot blocking
- Hard per-attempt timeout
- Bounded retries with linear backoff on thrown errors (network, timeout)
- Non-2xx responses returned immediately as typed failures, never retried

Content is returned as raw text; interpreting it is the caller's job.
"""

import asyncio
import logging
from dataclasses import dataclass

import aiohttp
from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt, wait_incrementing

from .config import config

logger = logging.getLogger(__name__)


@dataclass
class HttpFetchResult:
    """Result of fetching a URL."""
    success: bool
    content: str | None = None
    error: str | None = None
    status_code: int | None = None
    timed_out: bool = False  # final failure was a timeout
    attempts: int = 0


@dataclass
class HttpResponse:
    """A received response (any status)."""
    status: int
    reason: str
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


def _describe_error(error: BaseException) -> str:
    if isinstance(error, asyncio.TimeoutError):
        return "Request timed out"
    return str(error) or error.__class__.__name__


class HttpClient:
    """Fetches raw text content with retries."""

    def __init__(
        self,
        timeout: float | None = None,
        user_agent: str | None = None,
        retries: int | None = None,
        backoff: float | None = None,
    ):
        """
        Initialize the client.

        Args:
            timeout: Per-attempt timeout in seconds
            user_agent: User-Agent header value
            retries: Additional attempts after the first on thrown errors
            backoff: Linear backoff unit in seconds (waits 1x, 2x, ...)
        """
        self.timeout = config.HTTP_TIMEOUT if timeout is None else timeout
        self.retries = config.HTTP_RETRIES if retries is None else retries
        self.backoff = config.HTTP_BACKOFF if backoff is None else backoff
        self.user_agent = user_agent or config.HTTP_USER_AGENT
        self.headers = {
            "User-Agent": self.user_agent,
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
            "Accept-Language": "en-US,en;q=0.5",
            "Accept-Encoding": "gzip, deflate",
            "DNT": "1",
            "Connection": "keep-alive",
            "Upgrade-Insecure-Requests": "1",
        }

    async def fetch(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        retries: int | None = None,
    ) -> HttpFetchResult:
        """
        Fetch a URL as text.

        Makes at most retries + 1 attempts. Only thrown errors are retried;
        a received non-2xx response ends the call with status_code set.

        Args:
            url: URL to fetch
            headers: Extra headers merged over the defaults
            timeout: Override per-attempt timeout in seconds
            retries: Override retry budget

        Returns:
            HttpFetchResult with content on success
        """
        retries = self.retries if retries is None else retries
        timeout = self.timeout if timeout is None else timeout
        request_headers = {**self.headers, **(headers or {})}
        attempts = 0

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(retries + 1),
                wait=wait_incrementing(start=self.backoff, increment=self.backoff),
                before_sleep=self._log_retry,
                reraise=True,
            ):
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    response = await self._request(url, request_headers, timeout)
        except Exception as e:
            logger.warning(f"Fetch failed for {url} after {attempts} attempts: {_describe_error(e)}")
            return HttpFetchResult(
                success=False,
                error=f"Failed to fetch content after {attempts} attempts: {_describe_error(e)}",
                timed_out=isinstance(e, asyncio.TimeoutError),
                attempts=attempts,
            )

        if not response.ok:
            return HttpFetchResult(
                success=False,
                error=f"HTTP {response.status}: {response.reason}".rstrip(": "),
                status_code=response.status,
                attempts=attempts,
            )

        return HttpFetchResult(
            success=True,
            content=response.text,
            status_code=response.status,
            attempts=attempts,
        )

    async def _request(self, url: str, headers: dict[str, str], timeout: float) -> HttpResponse:
        """Single attempt; raises on network errors and timeouts."""
        async with aiohttp.ClientSession(headers=headers) as session:
            async with session.get(
                url,
                timeout=aiohttp.ClientTimeout(total=timeout),
                allow_redirects=True,
            ) as resp:
                text = await resp.text()
                return HttpResponse(status=resp.status, reason=resp.reason or "", text=text)

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.info(
            f"Fetch attempt {retry_state.attempt_number} failed "
            f"({_describe_error(error) if error else 'unknown error'}), retrying"
        )


async def fetch_content(
    url: str,
    timeout: float | None = None,
    user_agent: str | None = None,
    retries: int | None = None,
) -> HttpFetchResult:
    """Convenience function to fetch a single URL."""
    client = HttpClient(timeout=timeout, user_agent=user_agent, retries=retries)
    return await client.fetch(url)
