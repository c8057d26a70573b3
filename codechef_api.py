from __future__ import annotations

import asyncio
import json
import logging
import re
from typing import Any, Callable, Iterable, Mapping, Sequence

import aiohttp
from bs4 import BeautifulSoup

from config import CODECHEF_BASE, CODECHEF_HEATMAP_API
from contest_shape import build_contest, normalize_records
from errors import (
    ContestFeedError,
    ErrorPolicy,
    ExtractionError,
    HTTPStatusError,
    InvalidInput,
    NotFound,
    ParseFailure,
    RateLimited,
    Timeout,
    Unavailable,
    with_policy,
)
from fetcher import fetch
from literal_parser import LiteralSyntaxError, parse_literal
from models import (
    ContestGraphRecord,
    ContestHistoryEntry,
    HeatmapEntry,
    HeatmapRecord,
    NormalizedContest,
    Platform,
    ProfileRecord,
    Ranks,
)
from utils import IST, canonical_date, parse_datetime, to_count, to_epoch_ms, to_finite


logger = logging.getLogger(__name__)

MAX_STARS = 7
CONTEST_BUCKETS = ("future_contests", "present_contests", "past_contests")

_INT_RE = re.compile(r"\d+")
_STARS_RE = re.compile(r"★+")
_TOTAL_SOLVED_RE = re.compile(r"Total Problems Solved:\s*(\d+)", re.IGNORECASE)
_DAILY_STATS_RE = re.compile(r"var\s+userDailySubmissionsStats\s*=\s*(\[[\s\S]*?\]);")
_ALL_RATING_RE = re.compile(r"all_rating\s*=\s*(\[.*?\]);", re.DOTALL)


def profile_url(username: str) -> str:
    return f"{CODECHEF_BASE}/users/{username}"


def _require_username(username: str) -> str:
    name = (username or "").strip()
    if not name:
        raise InvalidInput("Username is required")
    return name


def _first_int(text: str) -> int:
    match = _INT_RE.search(text or "")
    return int(match.group(0)) if match else 0


def _text(soup: BeautifulSoup, selector: str) -> str:
    el = soup.select_one(selector)
    return el.get_text(strip=True) if el else ""


# --- problems solved: ordered strategies, first non-zero wins ---


def solved_from_fully_solved_heading(soup: BeautifulSoup) -> int:
    for heading in soup.find_all("h5"):
        if "Fully Solved" not in heading.get_text():
            continue
        sibling = heading.find_next_sibling()
        if sibling is not None:
            return _first_int(sibling.get_text(strip=True))
    return 0


def solved_from_total_text(soup: BeautifulSoup) -> int:
    body = soup.body or soup
    match = _TOTAL_SOLVED_RE.search(body.get_text(" "))
    return int(match.group(1)) if match else 0


def solved_from_status_links(soup: BeautifulSoup) -> int:
    return len(soup.select('a[href*="/status/"]'))


PROBLEMS_SOLVED_STRATEGIES: tuple[Callable[[BeautifulSoup], int], ...] = (
    solved_from_fully_solved_heading,
    solved_from_total_text,
    solved_from_status_links,
)


def extract_problems_solved(
    soup: BeautifulSoup,
    strategies: Sequence[Callable[[BeautifulSoup], int]] = PROBLEMS_SOLVED_STRATEGIES,
) -> int:
    for strategy in strategies:
        count = strategy(soup)
        if count:
            logger.debug("problems solved via %s: %d", strategy.__name__, count)
            return count
    return 0


def parse_profile(html: str, username: str) -> ProfileRecord:
    soup = BeautifulSoup(html, "html.parser")

    avatar = soup.select_one(".user-details-container img")
    stars = _STARS_RE.search(_text(soup, ".rating-header"))
    ranks = soup.select(".rating-ranks .inline-list strong")

    return ProfileRecord(
        username=username,
        display_name=_text(soup, ".h2-style"),
        avatar_url=avatar.get("src") if avatar else None,
        rating_text=_text(soup, ".rating-number"),
        star_count=min(len(stars.group(0)), MAX_STARS) if stars else 0,
        highest_rating=_first_int(_text(soup, ".rating-header small")),
        ranks=Ranks(
            global_rank=ranks[0].get_text(strip=True) if len(ranks) > 0 else "",
            country_rank=ranks[1].get_text(strip=True) if len(ranks) > 1 else "",
        ),
        problems_solved=extract_problems_solved(soup),
    )


def classify_error(exc: BaseException) -> ExtractionError:
    if isinstance(exc, ExtractionError):
        return exc
    if isinstance(exc, HTTPStatusError):
        if exc.status == 404:
            return NotFound("User not found on CodeChef")
        if exc.status in (403, 429):
            return RateLimited(
                "CodeChef is temporarily limiting requests. Please try again in a few minutes."
            )
    if isinstance(exc, asyncio.TimeoutError):
        return Timeout("CodeChef took too long to respond. Please try again.")
    return Unavailable(
        "Unable to fetch profile from CodeChef. Please verify the username and try again."
    )


@with_policy(ErrorPolicy.PROPAGATE, classify=classify_error)
async def get_profile(session: aiohttp.ClientSession, username: str) -> ProfileRecord:
    username = _require_username(username)
    resp = await fetch(session, profile_url(username))
    return parse_profile(resp.text, username)


# --- heatmap ---


def normalize_heatmap_entries(raw: Iterable[Any]) -> list[HeatmapEntry]:
    """Canonicalize dates and counts; entries without a usable date are
    dropped and repeated dates are merged."""
    counts: dict[str, int] = {}
    for item in raw:
        if not isinstance(item, Mapping):
            continue
        day = canonical_date(item.get("date"))
        if day is None:
            continue
        value = item.get("value")
        if value is None:
            value = item.get("count")
        counts[day] = counts.get(day, 0) + to_count(value)
    return [HeatmapEntry(date=day, count=count) for day, count in counts.items()]


def build_heatmap(entries: Sequence[HeatmapEntry], raw_count: int = 0) -> HeatmapRecord:
    active_days = sum(1 for entry in entries if entry.count > 0)
    if active_days == 0 and raw_count:
        active_days = raw_count
    return HeatmapRecord(
        active_days=active_days,
        total_submissions=sum(entry.count for entry in entries),
        heatmap_data=tuple(entries),
    )


def parse_daily_stats(html: str) -> list[HeatmapEntry]:
    match = _DAILY_STATS_RE.search(html or "")
    if not match:
        return []
    try:
        parsed = json.loads(match.group(1))
    except ValueError:
        logger.warning("userDailySubmissionsStats is not valid JSON")
        return []
    if not isinstance(parsed, list):
        return []
    return normalize_heatmap_entries(parsed)


async def _heatmap_from_api(
    session: aiohttp.ClientSession, username: str
) -> tuple[list[HeatmapEntry], int]:
    resp = await fetch(
        session,
        f"{CODECHEF_HEATMAP_API}/handle/{username}",
        headers={"Accept": "application/json"},
    )
    payload = resp.json()
    if not isinstance(payload, Mapping) or not payload.get("success"):
        return [], 0
    raw = payload.get("heatMap")
    if not isinstance(raw, list) or not raw:
        return [], 0
    return normalize_heatmap_entries(raw), len(raw)


@with_policy(ErrorPolicy.DEGRADE, default=HeatmapRecord.empty)
async def get_heatmap(session: aiohttp.ClientSession, username: str) -> HeatmapRecord:
    username = _require_username(username)
    try:
        entries, raw_count = await _heatmap_from_api(session, username)
    except Exception as exc:
        logger.warning("heatmap API failed for %s: %r", username, exc)
        entries, raw_count = [], 0
    if entries:
        return build_heatmap(entries, raw_count)

    logger.info("falling back to profile page heatmap for %s", username)
    resp = await fetch(session, profile_url(username))
    return build_heatmap(parse_daily_stats(resp.text))


# --- contest graph ---


def _history_entry(raw: Any) -> ContestHistoryEntry | None:
    if not isinstance(raw, Mapping):
        return None
    rating = to_finite(raw.get("rating"))
    rank = to_finite(raw.get("rank"))
    ended = parse_datetime(raw.get("end_date"), IST)
    if rating is None or rank is None or rank < 1 or ended is None:
        return None
    return ContestHistoryEntry(
        contest_code=str(raw.get("code") or ""),
        contest_name=str(raw.get("name") or ""),
        rating=int(rating),
        rank=int(rank),
        date=ended.date(),
    )


def parse_contest_graph(html: str) -> ContestGraphRecord:
    soup = BeautifulSoup(html, "html.parser")
    history: list[ContestHistoryEntry] = []
    found = False
    for script in soup.find_all("script"):
        content = script.string or script.get_text() or ""
        if "all_rating" not in content:
            continue
        match = _ALL_RATING_RE.search(content)
        if not match:
            continue
        try:
            rating_data = parse_literal(match.group(1))
        except LiteralSyntaxError as exc:
            logger.warning("unparseable all_rating literal: %s", exc)
            continue
        if not isinstance(rating_data, list):
            continue
        found = True
        for raw in rating_data:
            entry = _history_entry(raw)
            if entry is None:
                logger.warning("skipping malformed rating entry: %r", raw)
                continue
            history.append(entry)
    if not found:
        raise ParseFailure("Failed to extract contest graph")
    return ContestGraphRecord.from_history(history)


def _graph_failure(exc: Exception) -> ExtractionError:
    if isinstance(exc, ParseFailure):
        return exc
    return ParseFailure("Failed to extract contest graph")


@with_policy(ErrorPolicy.PROPAGATE, classify=_graph_failure)
async def get_contest_graph(session: aiohttp.ClientSession, username: str) -> ContestGraphRecord:
    username = _require_username(username)
    resp = await fetch(session, profile_url(username))
    return parse_contest_graph(resp.text)


# --- contest list ---


def _contest_time(raw: Mapping[str, Any], iso_key: str, text_key: str) -> float | None:
    # a malformed ISO field falls back to the published text form
    value = to_epoch_ms(raw.get(iso_key), IST)
    if value is None:
        value = to_epoch_ms(raw.get(text_key), IST)
    return value


def normalize_contest(raw: Mapping[str, Any]) -> NormalizedContest | None:
    start = _contest_time(raw, "contest_start_date_iso", "contest_start_date")
    end = _contest_time(raw, "contest_end_date_iso", "contest_end_date")
    code = raw.get("contest_code") or ""
    return build_contest(
        name=raw.get("contest_name"),
        platform=Platform.CODECHEF,
        start=start,
        end=end,
        duration_seconds=raw.get("contest_duration"),
        url=f"{CODECHEF_BASE}/{code}",
    )


def normalize_contest_payload(payload: Any) -> list[NormalizedContest]:
    if not isinstance(payload, Mapping):
        raise ValueError("contest payload is not an object")
    records: list[Any] = []
    for bucket in CONTEST_BUCKETS:
        items = payload.get(bucket) or []
        if isinstance(items, list):
            records.extend(items)
    return normalize_records(records, normalize_contest, Platform.CODECHEF)


def _feed_failure(exc: Exception) -> ExtractionError:
    return ContestFeedError(Platform.CODECHEF.value, "Failed to fetch CodeChef contests")


@with_policy(ErrorPolicy.PROPAGATE, classify=_feed_failure)
async def get_all_contests(session: aiohttp.ClientSession) -> list[NormalizedContest]:
    resp = await fetch(
        session,
        f"{CODECHEF_BASE}/api/list/contests/all",
        headers={"Accept": "application/json"},
    )
    return normalize_contest_payload(resp.json())
