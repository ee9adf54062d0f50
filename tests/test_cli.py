"""
Tests for the database management command.
"""

import pytest

from rental_marketplace import cli
from rental_marketplace.models.user import User, UserRole
from tests.conftest import count_rows


class TestSeedHost:
    """Test seeding of the demo host account."""

    async def test_seed_creates_verified_host(self, db_session):
        host = await cli.seed_host(db_session, "Demo@Example.com", "demopassword123")

        assert host.email == "demo@example.com"
        assert host.role == UserRole.TENANT
        assert host.is_verified is True
        assert host.verify_password("demopassword123")

    async def test_seed_is_idempotent(self, db_session):
        first = await cli.seed_host(db_session, "demo@example.com", "demopassword123")
        second = await cli.seed_host(db_session, "demo@example.com", "otherpassword123")

        assert first.id == second.id
        assert await count_rows(db_session, User) == 1


class TestCommandLine:
    """Test argument handling of the command."""

    def test_parser_commands(self):
        parser = cli.build_parser()

        assert parser.parse_args(["create"]).command == "create"
        assert parser.parse_args(["reset", "--confirm"]).confirm is True

        seed = parser.parse_args(["seed", "--password", "demopassword123"])
        assert seed.email == "host@example.com"
        assert seed.password == "demopassword123"

    def test_seed_requires_password(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["seed"])

    def test_no_command_prints_help(self, capsys):
        assert cli.main([]) == 1
        assert "usage" in capsys.readouterr().out.lower()

    def test_reset_requires_confirmation(self, capsys):
        assert cli.main(["reset"]) == 1
        assert "--confirm" in capsys.readouterr().out

    def test_runs_command(self, monkeypatch):
        calls = []

        async def fake_create_tables():
            calls.append("create")

        async def fake_close():
            calls.append("close")

        monkeypatch.setattr(cli, "create_tables", fake_create_tables)
        monkeypatch.setattr(cli, "close_db_connection", fake_close)

        assert cli.main(["create"]) == 0
        assert calls == ["create", "close"]

    def test_failure_returns_error_code(self, monkeypatch):
        async def broken_drop_tables():
            raise RuntimeError("Cannot drop tables in production environment")

        async def fake_close():
            return None

        monkeypatch.setattr(cli, "drop_tables", broken_drop_tables)
        monkeypatch.setattr(cli, "close_db_connection", fake_close)

        assert cli.main(["drop"]) == 1
