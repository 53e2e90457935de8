"""Notekeeper admin CLI — bootstrap the schema and manage roles.

Usage:
    notekeeper init-db                      # Create tables (dev/bootstrap)
    notekeeper users                        # List users
    notekeeper make-admin alice@example.com # Promote a user
    notekeeper make-regular bob@example.com # Demote a user

Role changes over HTTP need an existing admin, so the first admin is
promoted here. Users must have signed in once before they can be promoted.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import sys
from typing import Optional

import click

from notekeeper import __version__
from notekeeper.auth.roles import UserRole
from notekeeper.config import settings
from notekeeper.db.engine import make_engine, make_session_factory
from notekeeper.db.models import Base
from notekeeper.services.user_service import UserService

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from synchronous Click handler.

    Handles nested event loops (e.g. when invoked via Click CliRunner
    inside an existing async context like tests) by offloading to a thread.
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        # No running loop: normal CLI invocation
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "—")[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


async def _with_users(database_url: str, fn):
    """Open a session on `database_url`, call fn(UserService), dispose."""
    engine = make_engine(database_url)
    try:
        async with make_session_factory(engine)() as session:
            return await fn(UserService(session))
    finally:
        await engine.dispose()


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version=__version__, prog_name="notekeeper")
@click.option(
    "--database-url",
    default=lambda: settings.database_url,
    show_default="NOTEKEEPER_DATABASE_URL",
    help="SQLAlchemy async database URL.",
)
@click.pass_context
def main(ctx: click.Context, database_url: str):
    """Notekeeper — administer users of the notes API."""
    ctx.obj = {"database_url": database_url}


@main.command("init-db")
@click.pass_context
def init_db(ctx: click.Context):
    """Create all tables that do not exist yet.

    Production databases should use `alembic upgrade head` instead.
    """

    async def _impl():
        engine = make_engine(ctx.obj["database_url"])
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
        finally:
            await engine.dispose()

    _run(_impl())
    click.secho("Tables created.", fg="green")


@main.command()
@click.pass_context
def users(ctx: click.Context):
    """List all users, newest first."""
    rows = _run(_with_users(ctx.obj["database_url"], lambda svc: svc.list_users()))
    if not rows:
        click.echo("No users yet.")
        return
    _print_table(
        [
            {
                "id": str(u.id),
                "email": u.email,
                "name": u.name,
                "role": u.role,
                "created": u.created_at.strftime("%Y-%m-%d %H:%M") if u.created_at else None,
            }
            for u in rows
        ],
        [
            ("ID", "id", 36),
            ("EMAIL", "email", 32),
            ("NAME", "name", 20),
            ("ROLE", "role", 6),
            ("CREATED", "created", 16),
        ],
    )


def _set_role_by_email(database_url: str, email: str, role: UserRole) -> Optional[str]:
    async def _impl(svc: UserService):
        user = await svc.get_by_email(email)
        if user is None:
            return None
        await svc.set_role(str(user.id), role.value)
        return str(user.id)

    return _run(_with_users(database_url, _impl))


@main.command("make-admin")
@click.argument("email")
@click.pass_context
def make_admin(ctx: click.Context, email: str):
    """Give EMAIL the admin role."""
    user_id = _set_role_by_email(ctx.obj["database_url"], email, UserRole.ADMIN)
    if user_id is None:
        click.secho(f"Error: no user with email {email}", fg="red", err=True)
        sys.exit(1)
    click.secho(f"{email} ({user_id}) is now an admin.", fg="green")


@main.command("make-regular")
@click.argument("email")
@click.pass_context
def make_regular(ctx: click.Context, email: str):
    """Give EMAIL the regular user role."""
    user_id = _set_role_by_email(ctx.obj["database_url"], email, UserRole.USER)
    if user_id is None:
        click.secho(f"Error: no user with email {email}", fg="red", err=True)
        sys.exit(1)
    click.secho(f"{email} ({user_id}) is now a regular user.", fg="green")


if __name__ == "__main__":
    main()
