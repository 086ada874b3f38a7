"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.browser_pool import BrowserPool
from adapters.http_client import build_async_client
from core.config import AppSettings, write_user_env_vars

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(url: str) -> tuple[bool, str]:
    try:
        async with build_async_client() as client:
            response = await client.get(url)
        return True, f"HTTP {response.status_code}"
    except Exception as exc:
        return False, str(exc)


async def _check_browser(settings: AppSettings) -> tuple[bool, str]:
    """Launch the headless browser once and open a blank page."""

    pool = BrowserPool(settings)
    try:
        async with pool.page() as page:
            await page.goto("about:blank")
        return True, "Chromium OK"
    except Exception as exc:
        return False, str(exc)
    finally:
        await pool.close()


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="Consulta de partidas - Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    if settings.smtp_user and settings.smtp_password:
        table.add_row("SMTP credentials", "OK", f"{settings.smtp_host}:{settings.smtp_port}")
    else:
        table.add_row("SMTP credentials", "MISSING", "Run `partidas doctor setup-smtp`")
    table.add_row("Transport", "OK", settings.transport)
    table.add_row(
        "Request deadline",
        "OK",
        f"{settings.request_deadline_seconds}s" if settings.request_deadline_seconds else "disabled",
    )

    # Connectivity (best-effort)
    ok_http, detail_http = asyncio.run(_check_http(settings.catastro_url))
    table.add_row("Catastro connectivity", "OK" if ok_http else "FAIL", detail_http)

    # Browser
    ok_browser, detail_browser = asyncio.run(_check_browser(settings))
    if ok_browser:
        table.add_row("Headless browser", "OK", detail_browser)
    else:
        status = "FAIL" if settings.transport == "browser" else "OPTIONAL"
        table.add_row("Headless browser", status, detail_browser)

    _console.print(table)

    if not ok_browser:
        _console.print(
            "\n[yellow]Note:[/yellow] The browser transport needs `playwright install chromium`."
        )


@app.command(name="setup-smtp")
def setup_smtp() -> None:
    """Interactive SMTP setup (stores config in the user config .env)."""

    defaults = AppSettings()

    host = typer.prompt("SMTP host", default=defaults.smtp_host, show_default=True).strip()
    port = typer.prompt("SMTP port", default=defaults.smtp_port, show_default=True, type=int)
    user = typer.prompt("SMTP user").strip()
    password = typer.prompt("SMTP password", hide_input=True, confirmation_prompt=False).strip()
    bcc = typer.prompt("Operations BCC", default=defaults.mail_bcc or "", show_default=True).strip()

    if not host or not user:
        raise typer.BadParameter("host and user are required")

    env_path = write_user_env_vars(
        {
            "PARTIDAS_SMTP_HOST": host,
            "PARTIDAS_SMTP_PORT": str(port),
            "PARTIDAS_SMTP_USER": user,
            "PARTIDAS_SMTP_PASSWORD": password,
            "PARTIDAS_MAIL_BCC": bcc,
        }
    )

    _console.print(f"[green]Saved SMTP config to:[/green] {env_path}")
