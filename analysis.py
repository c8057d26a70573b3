from __future__ import annotations

import logging

import aiohttp

import codechef_api
from errors import InvalidInput, NotFound, Unavailable
from joins import gather_settled
from models import AnalysisBundle, AnalysisSummary, ContestGraphRecord, HeatmapRecord, ProfileRecord


logger = logging.getLogger(__name__)

DAYS_PER_YEAR = 365
DEFAULT_PROFILE_ERROR = "User not found or CodeChef is temporarily unavailable"


def rating_trend(graph: ContestGraphRecord) -> int:
    history = graph.contest_history
    if len(history) < 2:
        return 0
    return history[-1].rating - history[0].rating


def summarize(
    profile: ProfileRecord, heatmap: HeatmapRecord, graph: ContestGraphRecord
) -> AnalysisSummary:
    return AnalysisSummary(
        total_problems_solved=profile.problems_solved or 0,
        active_days=heatmap.active_days,
        activity_rate=f"{heatmap.active_days / DAYS_PER_YEAR:.2f}",
        contests_participated=graph.contests_participated,
        highest_rating=graph.highest_rating,
        best_rank=graph.exposed_best_rank,
        rating_trend=rating_trend(graph),
    )


def _profile_failure(error: BaseException | None) -> Exception:
    message = str(error) if error and str(error) else DEFAULT_PROFILE_ERROR
    lowered = message.lower()
    if "404" in lowered or "not found" in lowered:
        return NotFound("User not found on CodeChef")
    return Unavailable(message)


async def get_analysis(session: aiohttp.ClientSession, username: str) -> AnalysisBundle:
    username = (username or "").strip()
    if not username:
        raise InvalidInput("Username is required")

    (profile, profile_error), (heatmap, _), (graph, _) = await gather_settled(
        [
            (codechef_api.get_profile(session, username), None),
            (codechef_api.get_heatmap(session, username), HeatmapRecord.empty()),
            (codechef_api.get_contest_graph(session, username), ContestGraphRecord.empty()),
        ],
        labels=["profile", "heatmap", "contest graph"],
    )
    if not profile:
        raise _profile_failure(profile_error) from profile_error

    heatmap = heatmap or HeatmapRecord.empty()
    graph = graph or ContestGraphRecord.empty()
    summary = summarize(profile, heatmap, graph)
    logger.info(
        "analysis for %s: solved=%d active_days=%d contests=%d",
        username,
        summary.total_problems_solved,
        summary.active_days,
        summary.contests_participated,
    )
    return AnalysisBundle(
        username=username,
        profile_info=profile,
        summary=summary,
        submission_heatmap=heatmap,
        contest_graph=graph,
    )
