"""
Dispatcher — performs the HTTP call for one cron job.

This dispatcher:
- Sends GET <base_url><job.path> with Content-Type: application/json
- Adds Authorization: Bearer <secret> when a secret is configured
- Times the call from just before sending until the response headers arrive
- Turns every outcome into a DispatchResult; nothing is raised to the caller
- At extended verbosity, logs up to 10 KiB of the response body
- Records each attempt in the runner's StatsAggregator exactly once
"""

from __future__ import annotations

import logging
import time
import traceback
from datetime import datetime

import httpx

from nextcron.core.log import RunLog
from nextcron.core.types import DispatchResult, Verbosity
from nextcron.scheduler.job import Job
from nextcron.scheduler.stats import StatsAggregator

logger = logging.getLogger(__name__)

MAX_BODY_SIZE = 1024 * 10

DEFAULT_TIMEOUT = httpx.Timeout(
    connect=10.0,
    read=300.0,   # cron handlers can run for minutes
    write=10.0,
    pool=10.0,
)


class Dispatcher:
    """
    Calls cron endpoints.

    Usage:
        dispatcher = Dispatcher("http://localhost:3000", cron_secret="s3cret")
        result = await dispatcher.dispatch(Job("/api/crons/daily", "0 9 * * *"))
        await dispatcher.aclose()

    Pass ``transport=httpx.MockTransport(handler)`` to intercept requests.
    """

    def __init__(
        self,
        base_url: str,
        cron_secret: str = "",
        verbosity: Verbosity = Verbosity.QUIET,
        stats: StatsAggregator | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: httpx.Timeout = DEFAULT_TIMEOUT,
    ) -> None:
        self._base_url = base_url
        self._cron_secret = cron_secret
        self._log = RunLog(logger, verbosity)
        self._stats = stats or StatsAggregator()
        self._transport = transport
        self._timeout = timeout
        self._client: httpx.AsyncClient | None = None

    def build_url(self, job: Job) -> str:
        # Verbatim concatenation; duplicate slashes are kept
        return f"{self._base_url}{job.path}"

    def build_headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self._cron_secret:
            headers["Authorization"] = f"Bearer {self._cron_secret}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                transport=self._transport,
                timeout=self._timeout,
                follow_redirects=True,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def dispatch(self, job: Job) -> DispatchResult:
        """Call the job's endpoint once and classify the outcome."""
        timestamp = datetime.now().astimezone()
        self._log.info(f"Executing cron: {job.path}")

        started = time.perf_counter()
        try:
            client = await self._get_client()
            request = client.build_request("GET", self.build_url(job), headers=self.build_headers())
            response = await client.send(request, stream=True)
        except Exception as e:
            # Transport-level failures become a failed result, never an exception
            return self._record_error(job, e, timestamp, _elapsed_ms(started))

        duration = _elapsed_ms(started)
        try:
            success = response.is_success
            body = await self._capture_body(response) if self._log.verbosity >= Verbosity.EXTENDED else None
        finally:
            await response.aclose()

        self._stats.record(success, timestamp)
        if success:
            self._log.info(f"✓ Success: {job.path} ({response.status_code}) - {duration}ms")
        else:
            self._log.error(f"✗ Failed: {job.path} ({response.status_code}) - {duration}ms")
        if body:
            self._log.detail(f"  Response body: {body}", is_error=not success)

        return DispatchResult(
            path=job.path,
            schedule=job.schedule,
            success=success,
            status_code=response.status_code,
            timestamp=timestamp,
            duration=duration,
        )

    def _record_error(
        self,
        job: Job,
        error: Exception,
        timestamp: datetime,
        duration: int,
    ) -> DispatchResult:
        self._stats.record(False, timestamp)

        message = str(error) or "Unknown error"
        self._log.error(f"✗ Error: {job.path} - {message}")
        stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
        self._log.detail(
            f"  Error name: {type(error).__name__}\n"
            f"  Error message: {message}\n"
            f"  Error stack: {stack or 'N/A'}",
            is_error=True,
        )

        return DispatchResult(
            path=job.path,
            schedule=job.schedule,
            success=False,
            error=message,
            timestamp=timestamp,
            duration=duration,
        )

    async def _capture_body(self, response: httpx.Response) -> str:
        """
        Read the body for logging only.

        Skips bodies whose declared length exceeds MAX_BODY_SIZE and
        truncates longer decoded text. Read errors become a placeholder.
        """
        try:
            content_length = response.headers.get("content-length")
            # A non-numeric length counts as too large
            if content_length and (
                not content_length.strip().isdigit() or int(content_length) > MAX_BODY_SIZE
            ):
                return (
                    f"[Response body too large: {content_length} bytes, "
                    f"max: {MAX_BODY_SIZE} bytes]"
                )
            await response.aread()
            text = response.text
            if len(text) <= MAX_BODY_SIZE:
                return text
            return f"{text[:MAX_BODY_SIZE]}... [truncated, total length: {len(text)}]"
        except Exception as e:
            return f"[Unable to read response body: {str(e) or 'Unknown error'}]"


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
