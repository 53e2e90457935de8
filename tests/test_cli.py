"""Admin CLI tests — click commands against a throwaway SQLite file."""

import asyncio

import pytest
from click.testing import CliRunner
from sqlalchemy import select

from notekeeper.cli.main import main
from notekeeper.db.engine import make_engine, make_session_factory
from notekeeper.db.models import User


@pytest.fixture()
def db_url(tmp_path):
    url = f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}"
    result = CliRunner().invoke(main, ["--database-url", url, "init-db"])
    assert result.exit_code == 0, result.output
    assert "Tables created." in result.output
    return url


def _seed(url: str, email: str, role: str = "user") -> str:
    async def _impl():
        engine = make_engine(url)
        try:
            async with make_session_factory(engine)() as session:
                user = User(email=email, name="Seeded", role=role, external_id="g-1")
                session.add(user)
                await session.commit()
                return str(user.id)
        finally:
            await engine.dispose()

    return asyncio.run(_impl())


def _role(url: str, email: str) -> str:
    async def _impl():
        engine = make_engine(url)
        try:
            async with make_session_factory(engine)() as session:
                result = await session.execute(select(User.role).where(User.email == email))
                return result.scalar_one()
        finally:
            await engine.dispose()

    return asyncio.run(_impl())


def test_users_empty(db_url):
    result = CliRunner().invoke(main, ["--database-url", db_url, "users"])
    assert result.exit_code == 0
    assert "No users yet." in result.output


def test_users_lists_emails(db_url):
    _seed(db_url, "alice@example.com")
    result = CliRunner().invoke(main, ["--database-url", db_url, "users"])
    assert result.exit_code == 0
    assert "EMAIL" in result.output
    assert "alice@example.com" in result.output


def test_make_admin(db_url):
    user_id = _seed(db_url, "alice@example.com")
    result = CliRunner().invoke(
        main, ["--database-url", db_url, "make-admin", "alice@example.com"]
    )
    assert result.exit_code == 0, result.output
    assert f"alice@example.com ({user_id}) is now an admin." in result.output
    assert _role(db_url, "alice@example.com") == "admin"


def test_make_regular(db_url):
    _seed(db_url, "root@example.com", role="admin")
    result = CliRunner().invoke(
        main, ["--database-url", db_url, "make-regular", "root@example.com"]
    )
    assert result.exit_code == 0, result.output
    assert "is now a regular user." in result.output
    assert _role(db_url, "root@example.com") == "user"


def test_make_admin_unknown_email(db_url):
    result = CliRunner().invoke(
        main, ["--database-url", db_url, "make-admin", "ghost@example.com"]
    )
    assert result.exit_code == 1
    assert "no user with email ghost@example.com" in result.output
