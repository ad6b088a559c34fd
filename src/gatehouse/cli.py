"""Command-line interface for Gatehouse.

This module provides the CLI commands for running and managing
the Gatehouse application.
"""

import re
import secrets
from pathlib import Path
from typing import NoReturn

import click

from gatehouse import __version__
from gatehouse.core.config import get_settings
from gatehouse.core.logging import configure_logging, get_logger

SECRET_LENGTH_BYTES = 64
SECRET_ENV_VAR = "GATEHOUSE_SECRET_KEY"


@click.group()
@click.version_option(version=__version__, prog_name="Gatehouse")
def cli() -> None:
    """Gatehouse - user registration, authentication and session API.

    Settings are read from GATEHOUSE_* environment variables and .env.
    """


@cli.command()
@click.option("--host", type=str, default=None, help="Host to bind to (overrides config)")
@click.option("--port", type=int, default=None, help="Port to bind to (overrides config)")
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Start the Gatehouse server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting Gatehouse server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "gatehouse.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option("--force", is_flag=True, help="Skip confirmation and the production check")
def init_db(force: bool) -> None:
    """Create all database tables.

    Use this only in development. In production, run ``gatehouse migrate``.
    """
    import asyncio

    from gatehouse.infrastructure.persistence.database import get_db_manager, init_database

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo(
            "ERROR: Running in production mode. Use 'gatehouse migrate' instead of init-db.",
            err=True,
        )
        raise SystemExit(1)

    if not force:
        click.confirm(
            "This will create all database tables. Continue?",
            abort=True,
            default=False,
        )

    async def initialize():
        db = get_db_manager()
        try:
            if settings.is_production:
                await db.create_tables()
            else:
                await init_database()
            click.echo("Database initialized successfully.")
        finally:
            await db.disconnect()

    asyncio.run(initialize())


@cli.command()
@click.option("--revision", default="head", show_default=True, help="Target revision")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default="alembic.ini",
    show_default=True,
    help="Path to alembic.ini",
)
def migrate(revision: str, config_path: str) -> None:
    """Apply Alembic migrations to the configured database."""
    from alembic import command
    from alembic.config import Config

    settings = get_settings()
    configure_logging(settings)

    config = Config(config_path)
    script_location = config.get_main_option("script_location")
    if script_location and not Path(script_location).is_absolute():
        config.set_main_option(
            "script_location", str(Path(config_path).resolve().parent / script_location)
        )
    config.set_main_option("sqlalchemy.url", settings.database_url)

    command.upgrade(config, revision)
    click.echo(f"Database upgraded to {revision}.")


def generate_secret() -> str:
    """Generate a 512-bit hex signing secret."""
    return secrets.token_hex(SECRET_LENGTH_BYTES)


def write_secret_to_env(env_path: Path, secret: str, example_path: Path | None = None) -> None:
    """Insert or replace ``GATEHOUSE_SECRET_KEY`` in an env file.

    A missing env file is seeded from ``example_path`` when that exists.
    """
    if env_path.exists():
        content = env_path.read_text(encoding="utf-8")
    elif example_path is not None and example_path.exists():
        content = example_path.read_text(encoding="utf-8")
    else:
        content = ""

    line = f'{SECRET_ENV_VAR}="{secret}"'
    pattern = re.compile(rf"^{SECRET_ENV_VAR}=.*$", re.MULTILINE)
    if pattern.search(content):
        content = pattern.sub(lambda _: line, content)
    else:
        if content and not content.endswith("\n"):
            content += "\n"
        content += line + "\n"

    env_path.write_text(content, encoding="utf-8")


@cli.command("generate-secret")
@click.option(
    "--write",
    "env_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the secret into this env file (e.g. .env) instead of printing it",
)
def generate_secret_command(env_file: Path | None) -> None:
    """Generate a secure JWT signing secret."""
    secret = generate_secret()
    if env_file is None:
        click.echo(secret)
        return

    write_secret_to_env(env_file, secret, example_path=env_file.with_name(".env.example"))
    click.echo(f"{SECRET_ENV_VAR} updated in {env_file}")
    click.echo(f"Secret preview: {secret[:5]}...{secret[-5:]}")


@cli.command()
def info() -> None:
    """Display Gatehouse configuration."""
    settings = get_settings()

    click.echo(f"""
Gatehouse v{settings.app_version}

Application:
  Name:         {settings.app_name}
  Environment:  {settings.environment}
  Debug:        {settings.debug}
  API Prefix:   {settings.api_prefix}
  App URL:      {settings.app_url}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}

Database:
  URL:          {settings.database_url}
  Echo:         {settings.db_echo}

Security:
  Issuer:       {settings.jwt_issuer}
  Audience:     {settings.jwt_audience}
  Token Expire: {settings.access_token_expire_minutes} minutes
  Refresh Exp:  {settings.refresh_token_expire_days} days
  Max Attempts: {settings.max_login_attempts}
  Lockout:      {settings.lock_duration_minutes} minutes

Mail:
  Backend:      {settings.mail_backend}
  From:         {settings.mail_from_name} <{settings.mail_from_email}>

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    Called by the ``gatehouse`` console script and ``python -m gatehouse``.
    """
    cli()


if __name__ == "__main__":
    main()
