from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from typing import Any, Sequence

import aiohttp

import analysis
import codechef_api
import contests
from config import LOG_BACKUP_COUNT, LOG_FILE, LOG_LEVEL, LOG_MAX_BYTES
from errors import ExtractionError


def setup_logging() -> None:
    level = getattr(logging, LOG_LEVEL.upper(), logging.INFO)
    log_dir = os.path.dirname(LOG_FILE) or "."

    formatter = logging.Formatter(
        "%(asctime)s %(levelname)s %(name)s %(message)s"
    )
    handlers: list[logging.Handler] = []
    # stdout carries the JSON result
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(formatter)
    handlers.append(console)
    try:
        from logging.handlers import RotatingFileHandler

        os.makedirs(log_dir, exist_ok=True)
        file_handler = RotatingFileHandler(
            LOG_FILE, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT
        )
        file_handler.setFormatter(formatter)
        handlers.append(file_handler)
    except OSError:
        # fallback to console only
        pass

    logging.basicConfig(level=level, handlers=handlers)


logger = logging.getLogger("cp_aggregator")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cp-aggregator",
        description="Fetch and normalize competitive-programming profiles and contests.",
    )
    sub = parser.add_subparsers(dest="command", required=True)
    for name, help_text in (
        ("profile", "CodeChef profile"),
        ("heatmap", "CodeChef daily submission heatmap"),
        ("graph", "CodeChef contest rating history"),
        ("analysis", "profile, heatmap and contest history with a summary"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("username")
    contests_cmd = sub.add_parser("contests", help="contests from every platform")
    contests_cmd.add_argument(
        "--upcoming", action="store_true", help="only upcoming and ongoing contests"
    )
    return parser


async def run_command(args: argparse.Namespace, session: aiohttp.ClientSession) -> Any:
    if args.command == "profile":
        return (await codechef_api.get_profile(session, args.username)).to_dict()
    if args.command == "heatmap":
        return (await codechef_api.get_heatmap(session, args.username)).to_dict()
    if args.command == "graph":
        return (await codechef_api.get_contest_graph(session, args.username)).to_dict()
    if args.command == "analysis":
        return (await analysis.get_analysis(session, args.username)).to_dict()
    if args.upcoming:
        found = await contests.get_upcoming_contests(session)
    else:
        found = await contests.get_all_contests(session)
    return {"success": True, "count": len(found), "contests": [c.to_dict() for c in found]}


async def _run(args: argparse.Namespace) -> Any:
    async with aiohttp.ClientSession() as session:
        return await run_command(args, session)


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging()
    try:
        result = asyncio.run(_run(args))
    except ExtractionError as exc:
        logger.error("%s failed: %s", args.command, exc.message)
        payload = {"success": False, "status": exc.http_status, "error": exc.to_dict()}
        print(json.dumps(payload), file=sys.stderr)
        # caller mistakes (4xx) exit like argparse usage errors
        return 2 if exc.http_status < 500 else 1
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
