from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping

import aiohttp

from config import (
    HTTP_BACKOFF_SECONDS,
    HTTP_FOLLOW_REDIRECTS,
    HTTP_MAX_ATTEMPTS,
    HTTP_TIMEOUT_SECONDS,
    USER_AGENT,
)
from errors import HTTPStatusError


logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "gzip, deflate",
    "Connection": "keep-alive",
    "Upgrade-Insecure-Requests": "1",
}


@dataclass(frozen=True)
class FetchResponse:
    url: str
    status: int
    text: str

    def json(self) -> Any:
        return json.loads(self.text)


async def fetch(
    session: aiohttp.ClientSession,
    url: str,
    *,
    headers: Mapping[str, str] | None = None,
    method: str = "GET",
    json_body: Any = None,
    max_attempts: int = HTTP_MAX_ATTEMPTS,
    timeout: float = HTTP_TIMEOUT_SECONDS,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> FetchResponse:
    """Request ``url`` with up to ``max_attempts`` tries.

    5xx responses and transport errors are retried with a linear backoff
    (``attempt * HTTP_BACKOFF_SECONDS``). 4xx responses raise at once. The
    caller decides what an error means.
    """
    merged = {**BROWSER_HEADERS, **(headers or {})}
    request_kwargs: dict[str, Any] = {
        "headers": merged,
        "timeout": aiohttp.ClientTimeout(total=timeout),
        "allow_redirects": HTTP_FOLLOW_REDIRECTS,
    }
    if json_body is not None:
        request_kwargs["json"] = json_body

    for attempt in range(1, max_attempts + 1):
        delay = attempt * HTTP_BACKOFF_SECONDS
        try:
            async with session.request(method, url, **request_kwargs) as resp:
                status = resp.status
                if status < 400:
                    text = await resp.text()
                    return FetchResponse(url, status, text)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            if attempt == max_attempts:
                logger.warning("HTTP failed for %s after %d attempts: %r", url, attempt, exc)
                raise
            logger.warning("HTTP error for %s (%r), retrying in %.1fs", url, exc, delay)
            await sleep(delay)
            continue

        if status >= 500 and attempt < max_attempts:
            logger.warning("Transient HTTP %s for %s, retrying in %.1fs", status, url, delay)
            await sleep(delay)
            continue
        raise HTTPStatusError(status, url)

    # max_attempts < 1
    raise ValueError("max_attempts must be at least 1")
