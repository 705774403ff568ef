# testgenium/client/poller.py
"""
Consumer-side helper that waits for a job to reach a terminal state.

The server never blocks on a status read; this loop lives entirely on the
caller's side and only issues plain GETs against the status endpoint.
"""
import asyncio
import time
from typing import Any, Callable, Dict, Optional

import httpx

from testgenium.core.constants import TERMINAL_STATUSES
from testgenium.core.logging import logger

TERMINAL = {s.value for s in TERMINAL_STATUSES}


class PollTimeout(Exception):
    """The job was still not terminal when the poll budget ran out"""

    def __init__(self, job_id: str, last_status: Optional[Dict[str, Any]] = None):
        self.job_id = job_id
        self.last_status = last_status
        super().__init__(f"Job {job_id} did not finish in time")


async def poll_job(
    client: httpx.AsyncClient,
    job_id: str,
    token: str,
    interval: float = 2.0,
    max_duration: float = 300.0,
    backoff: float = 1.0,
    max_interval: float = 10.0,
    api_prefix: str = "/api/v1",
    on_update: Optional[Callable[[Dict[str, Any]], None]] = None,
) -> Dict[str, Any]:
    """
    Poll ``GET {api_prefix}/jobs/{job_id}`` until the job is completed or failed.

    The wait between reads starts at ``interval`` and is multiplied by
    ``backoff`` after every read, capped at ``max_interval``. Returns the
    final status document. Raises ``PollTimeout`` once ``max_duration``
    seconds have passed and ``httpx.HTTPStatusError`` on any non-2xx reply.
    """
    deadline = time.monotonic() + max_duration
    delay = interval
    last: Optional[Dict[str, Any]] = None

    while True:
        response = await client.get(
            f"{api_prefix}/jobs/{job_id}",
            headers={"Authorization": f"Bearer {token}"},
        )
        response.raise_for_status()
        last = response.json()

        if on_update is not None:
            on_update(last)
        if last.get("status") in TERMINAL:
            return last

        remaining = deadline - time.monotonic()
        if remaining <= 0:
            logger.warning(f"Gave up polling job after {max_duration:g}s", extra={"job_id": job_id})
            raise PollTimeout(job_id, last)

        await asyncio.sleep(min(delay, remaining))
        delay = min(delay * backoff, max_interval)
