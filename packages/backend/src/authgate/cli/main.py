"""authgate CLI — provision the user table, create users, mint tokens.

Usage:
    authgate serve                                # Run the API with uvicorn
    authgate init-db                              # Create tables
    authgate create-user a@x.com --password ...   # Add a user
    authgate token <user-id>                      # Print a signed token
    authgate token <user-id> --minutes 5          # ...with a custom lifetime

All commands read the same AUTHGATE_* environment as the server.
"""

from __future__ import annotations

import asyncio
import sys
from typing import Optional

import click

from authgate import __version__
from authgate.config import Settings, get_settings


def _run(coro):
    """Run an async coroutine from a synchronous Click handler."""
    return asyncio.run(coro)


def _settings() -> Settings:
    try:
        return get_settings()
    except ValueError as e:
        click.secho(f"Error: {e}", fg="red", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__, prog_name="authgate")
def main():
    """authgate — password and token authentication."""


@main.command()
@click.option("--reload", is_flag=True, help="Restart on code changes (development)")
def serve(reload: bool):
    """Serve the API on the configured host and port."""
    import uvicorn

    settings = _settings()
    uvicorn.run("authgate.main:app", host=settings.host, port=settings.port, reload=reload)


@main.command("init-db")
def init_db():
    """Create the users table if it does not exist."""
    _run(_init_db_impl(_settings()))
    click.secho("Database initialized", fg="green")


async def _init_db_impl(settings: Settings):
    from authgate.db.engine import build_engine, create_tables

    engine = build_engine(settings)
    try:
        await create_tables(engine)
    finally:
        await engine.dispose()


@main.command("create-user")
@click.argument("email")
@click.option("--password", prompt=True, hide_input=True, confirmation_prompt=True)
def create_user(email: str, password: str):
    """Create a user that can sign in with EMAIL and PASSWORD."""
    from authgate.auth.store import EmailTakenError

    settings = _settings()
    try:
        user_id = _run(_create_user_impl(settings, email, password))
    except EmailTakenError:
        click.secho(f"Error: {email} already has an account", fg="red", err=True)
        sys.exit(1)
    click.echo(user_id)


async def _create_user_impl(settings: Settings, email: str, password: str) -> str:
    from authgate.auth.store import SqlUserStore
    from authgate.db.engine import build_engine, build_session_factory, create_tables

    engine = build_engine(settings)
    try:
        if settings.create_tables:
            await create_tables(engine)
        store = SqlUserStore(build_session_factory(engine), bcrypt_rounds=settings.bcrypt_rounds)
        user = await store.create(email, password)
        return str(user.id)
    finally:
        await engine.dispose()


@main.command()
@click.argument("user_id")
@click.option("--minutes", type=int, default=None, help="Token lifetime (defaults to settings)")
def token(user_id: str, minutes: Optional[int]):
    """Print a signed token whose subject is USER_ID."""
    from authgate.auth.jwt import create_access_token

    click.echo(create_access_token(user_id, _settings().jwt_config(), expires_minutes=minutes))


if __name__ == "__main__":
    main()
