"""Tests for the command line entry point."""

import dataclasses
import json

import pytest

from exercise_tracker.core.errors import MISSING_USER_ID_MESSAGE
from exercise_tracker.main import build_parser, main


async def run_cli(capsys, config, *argv):
    """Run one CLI command and return its exit code and parsed stdout."""
    exit_code = await main(list(argv), config=config)
    out = capsys.readouterr().out
    return exit_code, json.loads(out)


def test_parser_log_options():
    args = build_parser().parse_args(
        ["log", "--user-id", "abc", "--from", "2020-01-01", "--to", "2020-02-01", "--limit", "3"]
    )

    assert args.user_id == "abc"
    assert args.from_date == "2020-01-01"
    assert args.to_date == "2020-02-01"
    assert args.limit == "3"


def test_parser_requires_command():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


@pytest.mark.integration
class TestCommands:
    """End-to-end CLI runs against a SQLite file."""

    @pytest.mark.asyncio
    async def test_init_db(self, capsys, test_config):
        assert await run_cli(capsys, test_config, "init-db") == (0, {"status": "ok"})

    @pytest.mark.asyncio
    async def test_new_user_and_conflict(self, capsys, test_config):
        code, created = await run_cli(capsys, test_config, "new-user", "alice")
        assert code == 0
        assert created["username"] == "alice"
        assert set(created) == {"id", "username"}

        code, conflict = await run_cli(capsys, test_config, "new-user", "alice")
        assert code == 0
        assert conflict == {"message": "User <alice> already exists."}

        code, listing = await run_cli(capsys, test_config, "users")
        assert code == 0
        assert listing == {"users": [created]}

    @pytest.mark.asyncio
    async def test_add_and_log(self, capsys, test_config):
        _, created = await run_cli(capsys, test_config, "new-user", "alice")
        user_id = created["id"]

        code, user = await run_cli(
            capsys, test_config, "add", user_id, "run", "30", "--date", "2020-01-01"
        )
        assert code == 0
        assert user == {
            "id": user_id,
            "username": "alice",
            "exercises": [{"description": "run", "duration": 30, "date": "2020-01-01"}],
        }
        await run_cli(capsys, test_config, "add", user_id, "swim", "20", "--date", "2020-02-01")

        code, log = await run_cli(capsys, test_config, "log", "--user-id", user_id, "--from", "2020-01-15")
        assert code == 0
        assert log == {
            "username": "alice",
            "exercises": [{"description": "swim", "duration": 20, "date": "2020-02-01"}],
        }

        code, full = await run_cli(capsys, test_config, "log", "--user-id", user_id)
        assert code == 0
        assert full["id"] == user_id
        assert len(full["exercises"]) == 2

    @pytest.mark.asyncio
    async def test_log_without_user_id(self, capsys, test_config):
        code, body = await run_cli(capsys, test_config, "log", "--limit", "1")

        assert code == 1
        assert body == {"error": MISSING_USER_ID_MESSAGE}

    @pytest.mark.asyncio
    async def test_add_for_unknown_user(self, capsys, test_config):
        code, body = await run_cli(capsys, test_config, "add", "0" * 32, "run", "30")

        assert code == 1
        assert body == {"error": f"User {'0' * 32} not found"}

    @pytest.mark.asyncio
    async def test_bad_limit(self, capsys, test_config):
        _, created = await run_cli(capsys, test_config, "new-user", "alice")

        code, body = await run_cli(
            capsys, test_config, "log", "--user-id", created["id"], "--limit", "many"
        )

        assert code == 1
        assert "limit" in body["error"]


@pytest.mark.integration
class TestUnreachableDatabase:
    """Schema failures are reported as JSON errors, not tracebacks."""

    @pytest.fixture
    def broken_config(self, test_config, tmp_path):
        return dataclasses.replace(
            test_config, database_url=f"sqlite:///{tmp_path}/missing/exercise_tracker.db"
        )

    @pytest.mark.asyncio
    async def test_init_db(self, capsys, broken_config):
        code, body = await run_cli(capsys, broken_config, "init-db")

        assert code == 1
        assert body["error"].startswith("Failed to create tables")

    @pytest.mark.asyncio
    async def test_auto_create_on_start(self, capsys, broken_config):
        code, body = await run_cli(capsys, broken_config, "users")

        assert code == 1
        assert body["error"].startswith("Failed to create tables")
