from __future__ import annotations

import enum
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any


class Platform(str, enum.Enum):
    LEETCODE = "leetcode"
    CODEFORCES = "codeforces"
    CODECHEF = "codechef"


class ContestStatus(str, enum.Enum):
    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Ranks:
    global_rank: str = ""
    country_rank: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"global": self.global_rank, "country": self.country_rank}


@dataclass(frozen=True)
class ProfileRecord:
    username: str
    display_name: str = ""
    avatar_url: str | None = None
    rating_text: str = ""
    star_count: int = 0
    highest_rating: int = 0
    ranks: Ranks = field(default_factory=Ranks)
    problems_solved: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "username": self.username,
            "displayName": self.display_name,
            "avatarUrl": self.avatar_url,
            "ratingText": self.rating_text,
            "starCount": self.star_count,
            "highestRating": self.highest_rating,
            "ranks": self.ranks.to_dict(),
            "problemsSolvedCount": self.problems_solved,
        }


@dataclass(frozen=True)
class HeatmapEntry:
    date: str
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date, "count": self.count}


@dataclass(frozen=True)
class HeatmapRecord:
    active_days: int = 0
    total_submissions: int = 0
    heatmap_data: tuple[HeatmapEntry, ...] = ()

    @classmethod
    def empty(cls) -> HeatmapRecord:
        return cls()

    def to_dict(self) -> dict[str, Any]:
        return {
            "activeDays": self.active_days,
            "totalSubmissions": self.total_submissions,
            "heatmapData": [entry.to_dict() for entry in self.heatmap_data],
        }


@dataclass(frozen=True)
class ContestHistoryEntry:
    contest_code: str
    contest_name: str
    rating: int
    rank: int
    date: date

    def to_dict(self) -> dict[str, Any]:
        return {
            "contestCode": self.contest_code,
            "contestName": self.contest_name,
            "rating": self.rating,
            "rank": self.rank,
            "date": self.date.isoformat(),
        }


@dataclass(frozen=True)
class ContestGraphRecord:
    """Contest history plus aggregates.

    ``best_rank`` is ``None`` when there is no history; ``exposed_best_rank``
    and ``to_dict`` render that as 0.
    """

    contests_participated: int = 0
    highest_rating: int = 0
    best_rank: int | None = None
    contest_history: tuple[ContestHistoryEntry, ...] = ()

    @classmethod
    def empty(cls) -> ContestGraphRecord:
        return cls()

    @classmethod
    def from_history(cls, history: list[ContestHistoryEntry]) -> ContestGraphRecord:
        if not history:
            return cls.empty()
        return cls(
            contests_participated=len(history),
            highest_rating=max(entry.rating for entry in history),
            best_rank=min(entry.rank for entry in history),
            contest_history=tuple(history),
        )

    @property
    def exposed_best_rank(self) -> int:
        return self.best_rank if self.best_rank is not None else 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "contestsParticipated": self.contests_participated,
            "highestRating": self.highest_rating,
            "bestRank": self.exposed_best_rank,
            "contestHistory": [entry.to_dict() for entry in self.contest_history],
        }


@dataclass(frozen=True)
class NormalizedContest:
    name: str
    platform: Platform
    start_time: int
    end_time: int
    duration_minutes: int
    url: str
    status: ContestStatus | None = None

    def status_at(self, now_ms: int) -> ContestStatus:
        if now_ms < self.start_time:
            return ContestStatus.UPCOMING
        if now_ms <= self.end_time:
            return ContestStatus.ONGOING
        return ContestStatus.COMPLETED

    def with_status(self, now_ms: int) -> NormalizedContest:
        return replace(self, status=self.status_at(now_ms))

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "platform": self.platform.value,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "durationMinutes": self.duration_minutes,
            "duration": f"{self.duration_minutes} minutes",
            "url": self.url,
            "status": self.status.value if self.status else None,
        }


@dataclass(frozen=True)
class AnalysisSummary:
    total_problems_solved: int
    active_days: int
    activity_rate: str
    contests_participated: int
    highest_rating: int
    best_rank: int
    rating_trend: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalProblemsSolved": self.total_problems_solved,
            "activeDays": self.active_days,
            "activityRate": self.activity_rate,
            "contestsParticipated": self.contests_participated,
            "highestRating": self.highest_rating,
            "bestRank": self.best_rank,
            "ratingTrend": self.rating_trend,
        }


@dataclass(frozen=True)
class AnalysisBundle:
    username: str
    profile_info: ProfileRecord
    summary: AnalysisSummary
    submission_heatmap: HeatmapRecord
    contest_graph: ContestGraphRecord

    def to_dict(self) -> dict[str, Any]:
        return {
            "profileInfo": self.profile_info.to_dict(),
            "analysis": {
                "username": self.username,
                "summary": self.summary.to_dict(),
                "strengths": {
                    "strongestCategory": "General",
                    "problemsSolvedInCategory": self.summary.total_problems_solved,
                },
            },
            "submissionHeatmap": self.submission_heatmap.to_dict(),
            "contestGraph": self.contest_graph.to_dict(),
        }
