import json

import pytest

import codechef_api
import codeforces_api
import contest_shape
import contests
import leetcode_api
from errors import ContestFeedError
from fakes import FakeResponse, FakeSession
from models import ContestStatus, NormalizedContest, Platform

HOUR_MS = 3_600_000


def make(name, start, end, platform=Platform.CODEFORCES):
    return NormalizedContest(
        name=name,
        platform=platform,
        start_time=start,
        end_time=end,
        duration_minutes=(end - start) // 60_000,
        url=f"https://example.test/{name}",
    )


def source_of(*items):
    async def source(session):
        return list(items)

    return source


def failing_source(session):
    async def fail():
        raise ContestFeedError("leetcode", "Failed to fetch LeetCode contests")

    return fail()


def test_infer_duration_prefers_span():
    assert contest_shape.infer_duration_ms(1000, 4000, 99) == 3000


def test_infer_duration_uses_seconds_when_span_invalid():
    assert contest_shape.infer_duration_ms(5000, 1000, 120) == 120_000
    assert contest_shape.infer_duration_ms(5000, None, "7200") == 7_200_000
    assert contest_shape.infer_duration_ms(5000, float("nan"), None) == 0
    assert contest_shape.infer_duration_ms(None, None, -5) == 0


def test_build_contest_reconstructs_end():
    contest = contest_shape.build_contest(
        name="Round", platform=Platform.CODEFORCES, start=1_000_000, end=None,
        duration_seconds=7200, url="u",
    )
    assert contest.end_time == 1_000_000 + 7_200_000
    assert contest.duration_minutes == 120
    assert contest.status is None


def test_build_contest_drops_unresolvable_start():
    assert contest_shape.build_contest(
        name="Round", platform=Platform.CODECHEF, start="soon", end=5, url="u"
    ) is None


def test_status_boundaries():
    contest = make("c", 1000, 2000)
    assert contest.status_at(999) is ContestStatus.UPCOMING
    assert contest.status_at(1000) is ContestStatus.ONGOING
    assert contest.status_at(2000) is ContestStatus.ONGOING
    assert contest.status_at(2001) is ContestStatus.COMPLETED


def test_normalizing_twice_differs_only_in_status():
    raw = {"id": 1900, "name": "Codeforces Round 1", "startTimeSeconds": 1700000000, "durationSeconds": 7200}
    first = codeforces_api.normalize_contest(raw).with_status(0)
    second = codeforces_api.normalize_contest(raw).with_status(1700000000 * 1000 + 1)
    assert first.status is ContestStatus.UPCOMING
    assert second.status is ContestStatus.ONGOING
    assert first == second.with_status(0)


def test_codechef_payload_buckets():
    payload = {
        "status": "success",
        "future_contests": [{
            "contest_code": "START200", "contest_name": "Starters 200",
            "contest_start_date": "14 Aug 2024  20:00:00",
            "contest_end_date": "14 Aug 2024  22:00:00",
            "contest_start_date_iso": "2024-08-14T20:00:00+05:30",
            "contest_end_date_iso": "2024-08-14T22:00:00+05:30",
            "contest_duration": "120",
        }],
        "present_contests": [{
            "contest_code": "PRAC", "contest_name": "Practice",
            "contest_start_date": "01 Jan 2024  00:00:00",
            "contest_end_date": "",
            "contest_duration": "600",
        }],
        "past_contests": [{"contest_code": "BROKEN", "contest_name": "Broken", "contest_start_date": "whenever"}],
    }
    result = codechef_api.normalize_contest_payload(payload)
    assert [c.name for c in result] == ["Starters 200", "Practice"]
    starters, practice = result
    assert starters.platform is Platform.CODECHEF
    assert starters.start_time == 1723645800000
    assert starters.duration_minutes == 120
    assert starters.url.endswith("/START200")
    # text dates are IST; missing end rebuilt from the seconds field
    assert practice.start_time == 1704047400000
    assert practice.end_time - practice.start_time == 600_000
    assert practice.duration_minutes == 10


def test_codechef_malformed_iso_falls_back_to_text_date():
    raw = {
        "contest_code": "START201", "contest_name": "Starters 201",
        "contest_start_date": "14 Aug 2024  20:00:00",
        "contest_end_date": "14 Aug 2024  22:00:00",
        "contest_start_date_iso": "not-a-date",
        "contest_end_date_iso": "TBD",
    }
    contest = codechef_api.normalize_contest(raw)
    assert contest is not None
    assert contest.start_time == 1723645800000
    assert contest.duration_minutes == 120


def test_codeforces_payload():
    payload = {"status": "OK", "result": [
        {"id": 2000, "name": "Div. 2", "phase": "BEFORE", "startTimeSeconds": 1800000000, "durationSeconds": 8100},
        {"id": 2001, "name": "No start", "phase": "BEFORE", "durationSeconds": 7200},
    ]}
    result = codeforces_api.normalize_contest_payload(payload)
    assert len(result) == 1
    assert result[0].start_time == 1_800_000_000_000
    assert result[0].duration_minutes == 135
    assert result[0].url == f"{codeforces_api.CODEFORCES_BASE}/contest/2000"


def test_codeforces_failed_status_raises():
    with pytest.raises(ValueError):
        codeforces_api.normalize_contest_payload({"status": "FAILED", "comment": "limit"})


def test_leetcode_payload():
    payload = {"data": {"allContests": [
        {"title": "Weekly Contest 400", "titleSlug": "weekly-contest-400", "startTime": 1717295400, "duration": 5400},
    ]}}
    result = leetcode_api.normalize_contest_payload(payload)
    assert result[0].platform is Platform.LEETCODE
    assert result[0].end_time == (1717295400 + 5400) * 1000
    assert result[0].url.endswith("/contest/weekly-contest-400")


@pytest.mark.asyncio
async def test_fetch_all_contests_merges_and_sorts():
    now = 10 * HOUR_MS
    a = make("late", 20 * HOUR_MS, 22 * HOUR_MS)
    b = make("past", 1 * HOUR_MS, 2 * HOUR_MS, Platform.CODECHEF)
    c = make("live", 9 * HOUR_MS, 11 * HOUR_MS, Platform.LEETCODE)
    d = make("tie", 20 * HOUR_MS, 21 * HOUR_MS, Platform.LEETCODE)
    result = await contests.fetch_all_contests(
        None, now_ms=now, sources=[source_of(a), source_of(b), source_of(c, d)]
    )
    assert [x.name for x in result] == ["past", "live", "late", "tie"]
    assert [x.status for x in result] == [
        ContestStatus.COMPLETED,
        ContestStatus.ONGOING,
        ContestStatus.UPCOMING,
        ContestStatus.UPCOMING,
    ]


@pytest.mark.asyncio
async def test_one_failing_source_fails_the_feed():
    with pytest.raises(ContestFeedError):
        await contests.fetch_all_contests(
            None,
            now_ms=0,
            sources=[source_of(make("a", 1, 2)), failing_source, source_of(make("b", 3, 4))],
        )


@pytest.mark.asyncio
async def test_get_upcoming_contests_filters():
    now = 10 * HOUR_MS
    sources = [source_of(
        make("past", 1 * HOUR_MS, 2 * HOUR_MS),
        make("live", 9 * HOUR_MS, 11 * HOUR_MS),
        make("next", 12 * HOUR_MS, 13 * HOUR_MS),
    )]
    result = await contests.get_upcoming_contests(None, now, sources=sources)
    assert [x.name for x in result] == ["live", "next"]


@pytest.mark.asyncio
async def test_source_feed_error_from_http(no_backoff):
    session = FakeSession({"contest.list": [FakeResponse(503)]})
    with pytest.raises(ContestFeedError) as info:
        await codeforces_api.get_all_contests(session)
    assert info.value.platform == "codeforces"


@pytest.mark.asyncio
async def test_leetcode_posts_graphql_query():
    body = {"data": {"allContests": [
        {"title": "Biweekly 1", "titleSlug": "biweekly-contest-1", "startTime": 1560000000, "duration": 5400},
    ]}}
    session = FakeSession({"/graphql": [FakeResponse(200, json.dumps(body))]})
    result = await leetcode_api.get_all_contests(session)
    method, _, kwargs = session.calls[0]
    assert method == "POST"
    assert "allContests" in kwargs["json"]["query"]
    assert result[0].name == "Biweekly 1"


def test_default_sources_cover_every_platform():
    assert contests.default_sources() == [
        codeforces_api.get_all_contests,
        codechef_api.get_all_contests,
        leetcode_api.get_all_contests,
    ]


@pytest.mark.asyncio
async def test_default_feed_includes_all_platforms(monkeypatch):
    monkeypatch.setattr(codeforces_api, "get_all_contests", source_of(make("cf", 1, 2)))
    monkeypatch.setattr(codechef_api, "get_all_contests", source_of(make("cc", 3, 4, Platform.CODECHEF)))
    monkeypatch.setattr(leetcode_api, "get_all_contests", source_of(make("lc", 5, 6, Platform.LEETCODE)))
    result = await contests.get_all_contests(None, 0)
    assert {x.platform for x in result} == {Platform.CODEFORCES, Platform.CODECHEF, Platform.LEETCODE}
