"""Command-line interface for TenantGate.

This module provides the CLI commands for running and managing the
TenantGate service.
"""

import asyncio
from datetime import timedelta
from typing import NoReturn

import click

from tenantgate.core.config import get_settings
from tenantgate.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version="0.1.0", prog_name="TenantGate")
def cli() -> None:
    """TenantGate - multi-tenant role-based access control.

    Settings are read from TENANTGATE_* environment variables or a .env file.
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
    """Start the TenantGate server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    configure_logging(settings)
    logger = get_logger(__name__)
    logger.info(
        "Starting TenantGate server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "tenantgate.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option(
    "--force",
    is_flag=True,
    help="Skip confirmation prompt",
)
def init_db(force: bool) -> None:
    """Create every database table.

    Existing tables are left untouched.
    """
    from tenantgate.infrastructure.persistence.database import (
        get_db_manager,
        init_database,
    )

    settings = get_settings()
    configure_logging(settings)

    if not force:
        click.confirm(
            f"This will create all tables in {settings.database_url}. Continue?",
            abort=True,
            default=False,
        )

    async def initialize() -> None:
        try:
            await init_database(create_tables=True)
            click.echo("Database initialized successfully.")
        finally:
            await get_db_manager().disconnect()

    asyncio.run(initialize())


@cli.command()
@click.option("--user-id", required=True, help="Subject user id")
@click.option(
    "--tenant-id",
    default="",
    show_default=True,
    help="Tenant of the user, empty for a platform user",
)
@click.option(
    "--role-id",
    "role_ids",
    multiple=True,
    help="Role id held by the user (repeatable)",
)
@click.option("--username", default="", help="Display username")
@click.option(
    "--expires-minutes",
    type=int,
    default=None,
    help="Token lifetime (defaults to config)",
)
def issue_token(
    user_id: str,
    tenant_id: str,
    role_ids: tuple[str, ...],
    username: str,
    expires_minutes: int | None,
) -> None:
    """Issue an access token for a user.

    Intended for development and operations, where no identity provider
    is available to sign tokens.
    """
    from tenantgate.infrastructure.auth import jwt_service

    settings = get_settings()
    configure_logging(settings)

    expires_delta = timedelta(minutes=expires_minutes) if expires_minutes else None
    token = jwt_service.create_access_token(
        user_id=user_id,
        tenant_id=tenant_id,
        role_ids=list(role_ids),
        username=username,
        expires_delta=expires_delta,
    )
    get_logger(__name__).info(
        "Access token issued via CLI",
        user_id=user_id,
        tenant_id=tenant_id,
        role_count=len(role_ids),
    )
    click.echo(token)


@cli.command()
@click.option("--user-id", required=True, help="User to make super admin")
def bootstrap_admin(user_id: str) -> None:
    """Grant a user the platform super admin role.

    Creates the ``super_admin`` platform role when missing, grants it every
    menu in the catalog and assigns it to the user. Safe to run again after
    menus are added.
    """
    from tenantgate.core.exceptions import TenantGateError
    from tenantgate.domain.services import RoleService
    from tenantgate.infrastructure.persistence.database import (
        get_db_manager,
        init_database,
    )

    settings = get_settings()
    configure_logging(settings)
    logger = get_logger(__name__)

    async def bootstrap() -> None:
        db = get_db_manager()
        try:
            await init_database(db, create_tables=True)
            async with db.session() as session:
                role = await RoleService(session).bootstrap_super_admin(user_id)
                await session.commit()
        except TenantGateError as e:
            logger.error("Super admin bootstrap failed", user_id=user_id, error=e.message)
            click.echo(f"Error: {e.message}", err=True)
            raise SystemExit(1) from e
        finally:
            await db.disconnect()

        click.echo(
            f"User {user_id} holds role {role.key} ({role.id}) "
            f"with {len(role.menu_ids)} menus."
        )

    asyncio.run(bootstrap())


@cli.command()
def info() -> None:
    """Display TenantGate configuration."""
    settings = get_settings()

    click.echo(f"""
TenantGate v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}
  API Prefix:   {settings.api_prefix}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}

Database:
  URL:          {settings.database_url}
  Pool Size:    {settings.db_pool_size}
  Echo:         {settings.db_echo}

Security:
  Token Expire: {settings.access_token_expire_minutes} minutes

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    Called by the `tenantgate` command and by `python -m tenantgate`.
    """
    cli()


if __name__ == "__main__":
    main()
