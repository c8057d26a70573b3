from __future__ import annotations

from typing import Any, Mapping

import aiohttp

from config import CODEFORCES_API, CODEFORCES_BASE
from contest_shape import build_contest, normalize_records
from errors import ContestFeedError, ErrorPolicy, ExtractionError, with_policy
from fetcher import fetch
from models import NormalizedContest, Platform
from utils import to_finite


def normalize_contest(raw: Mapping[str, Any]) -> NormalizedContest | None:
    start_seconds = to_finite(raw.get("startTimeSeconds"))
    if start_seconds is None:
        return None
    return build_contest(
        name=raw.get("name"),
        platform=Platform.CODEFORCES,
        start=start_seconds * 1000,
        duration_seconds=raw.get("durationSeconds"),
        url=f"{CODEFORCES_BASE}/contest/{raw.get('id', '')}",
    )


def normalize_contest_payload(payload: Any) -> list[NormalizedContest]:
    if not isinstance(payload, Mapping) or payload.get("status") != "OK":
        comment = payload.get("comment") if isinstance(payload, Mapping) else None
        raise ValueError(f"Codeforces API returned an error: {comment or 'unknown'}")
    result = payload.get("result")
    if not isinstance(result, list):
        raise ValueError("Codeforces API result is not a list")
    return normalize_records(result, normalize_contest, Platform.CODEFORCES)


def _feed_failure(exc: Exception) -> ExtractionError:
    return ContestFeedError(Platform.CODEFORCES.value, "Failed to fetch Codeforces contests")


@with_policy(ErrorPolicy.PROPAGATE, classify=_feed_failure)
async def get_all_contests(session: aiohttp.ClientSession) -> list[NormalizedContest]:
    resp = await fetch(
        session,
        f"{CODEFORCES_API}/contest.list?gym=false",
        headers={"Accept": "application/json"},
    )
    return normalize_contest_payload(resp.json())
