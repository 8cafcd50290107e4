"""CLI entrypoint — Typer-based command interface.

Commands:
    vinrelay serve        — Start the FastAPI server
    vinrelay check-vin    — Check a VIN's shape the way the form does
    vinrelay show-config  — Print effective settings without secret values
"""

from __future__ import annotations

import typer

app = typer.Typer(
    name="vinrelay",
    help="VIN Relay — validates VIN form submissions and relays them by email",
)


@app.command()
def serve(
    host: str = typer.Option("", help="API server host (default: API_HOST)"),
    port: int = typer.Option(0, help="API server port (default: API_PORT)"),
    reload: bool = typer.Option(False, help="Enable auto-reload for development"),
) -> None:
    """Start the VIN relay API server."""
    import uvicorn

    from vinrelay.config import get_settings

    settings = get_settings()
    uvicorn.run(
        "vinrelay.api.app:create_app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        factory=True,
    )


@app.command("check-vin")
def check_vin(
    vin: str = typer.Argument(help="VIN to check (trimmed and upper-cased first)"),
) -> None:
    """Check whether a VIN has a valid shape. Exits 1 when it does not."""
    from vinrelay.relay.validators import is_valid_vin

    normalized = vin.strip().upper()
    if is_valid_vin(normalized):
        typer.echo(f"{normalized}: valid")
        return
    typer.echo(f"{normalized}: invalid VIN format", err=True)
    raise typer.Exit(code=1)


@app.command("show-config")
def show_config() -> None:
    """Print the effective configuration. Secrets are shown as set/unset only."""
    from vinrelay.config import get_settings

    settings = get_settings()
    hint = settings.mail_config_hint()
    origins = settings.allowed_origins_list

    typer.echo(f"Relay path:       {settings.relay_path}")
    typer.echo(f"Legacy path:      {settings.legacy_relay_path or '(disabled)'}")
    typer.echo(f"Allowed origins:  {', '.join(origins) if origins else '(any)'}")
    typer.echo(f"Rate limit:       {settings.rate_limit_max_requests} per {settings.rate_limit_window_ms} ms")
    typer.echo(f"Recipient:        {settings.to_email}")
    typer.echo(f"Sender:           {'set' if hint['fromEmailConfigured'] else 'unset'}")
    typer.echo(f"SendGrid API key: {'set' if hint['apiKeyConfigured'] else 'unset'}")
    typer.echo(f"Metrics token:    {'set' if settings.metrics_token else 'unset'}")
