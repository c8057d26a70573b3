"""Per-record mapping of raw contest feeds into ``NormalizedContest``."""
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping

from models import NormalizedContest, Platform
from utils import to_finite


logger = logging.getLogger(__name__)


def infer_duration_ms(start: Any, end: Any, duration_seconds: Any) -> float:
    start_ms = to_finite(start)
    end_ms = to_finite(end)
    if start_ms is not None and end_ms is not None and end_ms >= start_ms:
        return end_ms - start_ms
    seconds = to_finite(duration_seconds)
    if seconds is not None and seconds > 0:
        return seconds * 1000
    return 0


def build_contest(
    *,
    name: Any,
    platform: Platform,
    start: Any,
    end: Any = None,
    duration_seconds: Any = None,
    url: str,
) -> NormalizedContest | None:
    """Map one raw record to the canonical shape, or ``None`` to drop it."""
    start_ms = to_finite(start)
    if start_ms is None:
        return None
    duration_ms = infer_duration_ms(start_ms, end, duration_seconds)
    end_ms = to_finite(end)
    if end_ms is None or end_ms < start_ms:
        end_ms = start_ms + duration_ms
    return NormalizedContest(
        name=str(name).strip() if name else "Unnamed Contest",
        platform=platform,
        start_time=int(start_ms),
        end_time=int(end_ms),
        duration_minutes=max(0, round(duration_ms / 60_000)),
        url=url,
    )


def normalize_records(
    records: Iterable[Mapping[str, Any]],
    mapper: Callable[[Mapping[str, Any]], NormalizedContest | None],
    platform: Platform,
) -> list[NormalizedContest]:
    contests: list[NormalizedContest] = []
    dropped = 0
    for record in records:
        contest = mapper(record) if isinstance(record, Mapping) else None
        if contest is None:
            dropped += 1
            continue
        contests.append(contest)
    if dropped:
        logger.warning("dropped %d unusable %s contest records", dropped, platform.value)
    return contests
