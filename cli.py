"""CLI entry point for uazapi-proxy."""

import sys
from datetime import datetime

from pydantic import ValidationError
from rich.console import Console

from app import create_app
from auth import check_identity
from core.config import CONFIG_FILE, load_config
from ui.dashboard import Dashboard
from ui.log_utils import CLI_LOG_FILE, clear_logs, write_cli_log

console = Console()


def main():
    """Main CLI entry point."""
    try:
        config = load_config()
    except ValidationError as e:
        console.print(f"[red][ERROR][/red] Invalid configuration: {e}")
        sys.exit(1)

    # Handle CLI arguments
    if len(sys.argv) > 1:
        arg = sys.argv[1]

        if arg == "--check":
            if not check_identity(config):
                sys.exit(1)
            return

        if arg == "--config":
            console.print(f"[bold]Config:[/bold] {CONFIG_FILE}")
            console.print(f"[bold]Log:[/bold]    {CLI_LOG_FILE}")
            return

        if arg in ("--help", "-h"):
            _print_help()
            return

    # Requests are refused with missing-admin-token until this is fixed
    if not config.upstream.admin_token:
        console.print("[yellow]Warning:[/yellow] Uazapi admin token not configured!")
        console.print(f"[dim]Set UAZAPI_ADMIN_TOKEN or edit {CONFIG_FILE}[/dim]")

    if not config.identity.base_url:
        console.print("[yellow]Warning:[/yellow] Identity provider not configured, every request will be rejected")

    clear_logs()
    dashboard = Dashboard(config)

    import uvicorn

    app = create_app(config, dashboard)

    uvicorn_config = uvicorn.Config(
        app,
        host=config.proxy.host,
        port=config.proxy.port,
        log_level="warning",
    )
    server = uvicorn.Server(uvicorn_config)

    dashboard.start()
    start_time = datetime.now()
    write_cli_log("STARTUP", "Proxy started", port=config.proxy.port, upstream=config.upstream.base_url)
    try:
        server.run()
    finally:
        duration = datetime.now() - start_time
        write_cli_log("SHUTDOWN", "Proxy stopped", duration=str(duration))
        dashboard.stop()


def _print_help():
    """Print help message."""
    help_text = """
[bold cyan]Uazapi Proxy[/bold cyan]

Verifies Supabase sessions and forwards requests to the Uazapi API with the
admin token or the caller's instance token.

[bold]Usage:[/bold]
    uazapi-proxy              Start with live dashboard
    uazapi-proxy --check      Check identity provider and admin token
    uazapi-proxy --config     Show config locations
    uazapi-proxy --help       Show this help

[bold]Environment:[/bold]
    UAZAPI_BASE_URL, UAZAPI_ADMIN_TOKEN
    SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY
    UAZAPI_PROXY_PORT
"""
    console.print(help_text)


if __name__ == "__main__":
    main()
