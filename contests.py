from __future__ import annotations

import logging
from typing import Awaitable, Callable, Iterable, Sequence

import aiohttp

import codechef_api
import codeforces_api
import leetcode_api
from joins import gather_all
from models import ContestStatus, NormalizedContest
from utils import now_ms as clock_ms


logger = logging.getLogger(__name__)

ContestSource = Callable[[aiohttp.ClientSession], Awaitable[list[NormalizedContest]]]

ACTIVE_STATUSES = frozenset({ContestStatus.UPCOMING, ContestStatus.ONGOING})


def apply_status(contests: Iterable[NormalizedContest], now_ms: int) -> list[NormalizedContest]:
    # sorted() is stable, so equal start times keep concatenation order
    stamped = [contest.with_status(now_ms) for contest in contests]
    return sorted(stamped, key=lambda contest: contest.start_time)


def default_sources() -> list[ContestSource]:
    """Every platform, always; a feed missing one of them is never returned."""
    return [
        codeforces_api.get_all_contests,
        codechef_api.get_all_contests,
        leetcode_api.get_all_contests,
    ]


async def fetch_all_contests(
    session: aiohttp.ClientSession,
    *,
    now_ms: int,
    sources: Sequence[ContestSource] | None = None,
) -> list[NormalizedContest]:
    if sources is None:
        sources = default_sources()
    batches = await gather_all(*(source(session) for source in sources))
    merged = [contest for batch in batches for contest in batch]
    logger.info("fetched %d contests from %d sources", len(merged), len(batches))
    return apply_status(merged, now_ms)


async def get_all_contests(
    session: aiohttp.ClientSession,
    now_ms: int | None = None,
    *,
    sources: Sequence[ContestSource] | None = None,
) -> list[NormalizedContest]:
    if now_ms is None:
        now_ms = clock_ms()
    return await fetch_all_contests(session, now_ms=now_ms, sources=sources)


async def get_upcoming_contests(
    session: aiohttp.ClientSession,
    now_ms: int | None = None,
    *,
    sources: Sequence[ContestSource] | None = None,
) -> list[NormalizedContest]:
    contests = await get_all_contests(session, now_ms, sources=sources)
    return [contest for contest in contests if contest.status in ACTIVE_STATUSES]
