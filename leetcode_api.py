from __future__ import annotations

from typing import Any, Mapping

import aiohttp

from config import LEETCODE_BASE
from contest_shape import build_contest, normalize_records
from errors import ContestFeedError, ErrorPolicy, ExtractionError, with_policy
from fetcher import fetch
from models import NormalizedContest, Platform
from utils import to_finite


CONTESTS_QUERY = """
query allContests {
  allContests {
    title
    titleSlug
    startTime
    duration
  }
}
"""


def normalize_contest(raw: Mapping[str, Any]) -> NormalizedContest | None:
    start_seconds = to_finite(raw.get("startTime"))
    if start_seconds is None:
        return None
    return build_contest(
        name=raw.get("title"),
        platform=Platform.LEETCODE,
        start=start_seconds * 1000,
        duration_seconds=raw.get("duration"),
        url=f"{LEETCODE_BASE}/contest/{raw.get('titleSlug', '')}",
    )


def normalize_contest_payload(payload: Any) -> list[NormalizedContest]:
    data = payload.get("data") if isinstance(payload, Mapping) else None
    contests = data.get("allContests") if isinstance(data, Mapping) else None
    if not isinstance(contests, list):
        errors = payload.get("errors") if isinstance(payload, Mapping) else None
        raise ValueError(f"LeetCode GraphQL returned no contests: {errors or 'unknown'}")
    return normalize_records(contests, normalize_contest, Platform.LEETCODE)


def _feed_failure(exc: Exception) -> ExtractionError:
    return ContestFeedError(Platform.LEETCODE.value, "Failed to fetch LeetCode contests")


@with_policy(ErrorPolicy.PROPAGATE, classify=_feed_failure)
async def get_all_contests(session: aiohttp.ClientSession) -> list[NormalizedContest]:
    resp = await fetch(
        session,
        f"{LEETCODE_BASE}/graphql",
        method="POST",
        json_body={"query": CONTESTS_QUERY, "operationName": "allContests", "variables": {}},
        headers={
            "Accept": "application/json",
            "Content-Type": "application/json",
            "Referer": f"{LEETCODE_BASE}/contest/",
        },
    )
    return normalize_contest_payload(resp.json())
