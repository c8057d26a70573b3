import json

import pytest

import codechef_api
import contests
import main
from errors import InvalidInput, NotFound, RateLimited
from models import NormalizedContest, Platform, ProfileRecord


def test_parser_requires_username():
    with pytest.raises(SystemExit):
        main.build_parser().parse_args(["profile"])


@pytest.mark.asyncio
async def test_run_command_contests_upcoming(monkeypatch):
    contest = NormalizedContest("Round", Platform.CODEFORCES, 10, 20, 0, "u").with_status(0)

    async def fake_upcoming(session):
        return [contest]

    monkeypatch.setattr(contests, "get_upcoming_contests", fake_upcoming)
    args = main.build_parser().parse_args(["contests", "--upcoming"])
    result = await main.run_command(args, None)
    assert result["count"] == 1
    assert result["contests"][0]["status"] == "upcoming"


def test_main_prints_profile(monkeypatch, capsys):
    async def fake_profile(session, username):
        return ProfileRecord(username=username, problems_solved=3)

    monkeypatch.setattr(codechef_api, "get_profile", fake_profile)
    monkeypatch.setattr(main, "setup_logging", lambda: None)
    assert main.main(["profile", "alice"]) == 0
    out = json.loads(capsys.readouterr().out)
    assert out["username"] == "alice"
    assert out["problemsSolvedCount"] == 3


def test_main_reports_not_found(monkeypatch, capsys):
    async def fake_profile(session, username):
        raise NotFound("User not found on CodeChef")

    monkeypatch.setattr(codechef_api, "get_profile", fake_profile)
    monkeypatch.setattr(main, "setup_logging", lambda: None)
    assert main.main(["profile", "ghost"]) == 2
    err = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert err["error"] == {"kind": "not_found", "message": "User not found on CodeChef"}
    assert err["status"] == 404


def test_main_server_side_failure_exits_one(monkeypatch, capsys):
    async def fake_profile(session, username):
        raise RateLimited("CodeChef is rate limiting requests")

    monkeypatch.setattr(codechef_api, "get_profile", fake_profile)
    monkeypatch.setattr(main, "setup_logging", lambda: None)
    assert main.main(["profile", "alice"]) == 1
    err = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert err["status"] == 500
    assert err["error"]["kind"] == "rate_limited"


def test_main_invalid_input_exits_two(monkeypatch, capsys):
    async def fake_profile(session, username):
        raise InvalidInput("Username is required")

    monkeypatch.setattr(codechef_api, "get_profile", fake_profile)
    monkeypatch.setattr(main, "setup_logging", lambda: None)
    assert main.main(["profile", "x"]) == 2
    err = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
    assert err["status"] == 400
