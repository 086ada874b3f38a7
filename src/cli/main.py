"""CLI principal (Typer).

Comandos:
- `resolver`: partida matriz o unidades funcionales (y opcionalmente email).
- `verificar`: existencia de la partida (consulta de deuda ABL).
- `serve`: levanta la API HTTP.
- `doctor`: diagnóstico del entorno.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

import typer
from rich.console import Console

from adapters.browser_pool import BrowserPool
from adapters.email_notifier import SmtpNotifier
from adapters.json_exporter import existence_payload, export_result_json, resolution_payload
from adapters.transports import build_transport
from cli import doctor
from cli.ui_components import build_existence_panel, build_resolution_panel, print_banner
from core.config import AppSettings
from core.domain.errors import (
    DeadlineExceededError,
    NotificationError,
    PartidasError,
    ResolutionError,
    TransportError,
    VerificationError,
)
from core.domain.models import Coordinate
from core.logging import configure_logging
from core.services.parcel_service import ParcelService

T = TypeVar("T")

app = typer.Typer(no_args_is_help=True, help="Consulta de partidas ABL por coordenadas.")
app.add_typer(doctor.app, name="doctor")

_console = Console()

# Orden: subclases antes que sus bases.
_EXIT_CODES: tuple[tuple[type[PartidasError], int, str], ...] = (
    (ResolutionError, 2, "No se pudo obtener el número de partida"),
    (VerificationError, 3, "No se pudo verificar la existencia de la partida"),
    (NotificationError, 4, "La partida se resolvió pero no se pudo enviar el email"),
    (DeadlineExceededError, 5, "Tiempo de espera agotado"),
    (TransportError, 6, "Servicio externo inalcanzable"),
)


def _settings(transport: str | None) -> AppSettings:
    if transport is not None and transport not in ("http", "browser"):
        raise typer.BadParameter("transport must be `http` or `browser`", param_hint="--transport")
    overrides = {"transport": transport} if transport else {}
    return AppSettings(**overrides)


async def _with_service(settings: AppSettings, fn: Callable[[ParcelService], Awaitable[T]]) -> T:
    pool = BrowserPool(settings) if settings.transport == "browser" else None
    service = ParcelService(
        transport=build_transport(settings, pool),
        settings=settings,
        notifier=SmtpNotifier(settings),
    )
    try:
        return await fn(service)
    finally:
        if pool is not None:
            await pool.close()


def _fail(exc: PartidasError) -> typer.Exit:
    for error_type, code, message in _EXIT_CODES:
        if isinstance(exc, error_type):
            _console.print(f"[red]{message}:[/red] {exc}")
            return typer.Exit(code=code)
    _console.print(f"[red]Error:[/red] {exc}")
    return typer.Exit(code=1)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Logs de depuración."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Sin banner."),
) -> None:
    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level, json=settings.log_json)
    if not quiet:
        print_banner(_console)


@app.command()
def resolver(
    lat: float = typer.Option(..., "--lat", help="Latitud."),
    lng: float = typer.Option(..., "--lng", help="Longitud."),
    email: Optional[str] = typer.Option(None, "--email", help="Enviar el resultado a este email."),
    transport: Optional[str] = typer.Option(None, "--transport", help="http | browser"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Exportar JSON."),
) -> None:
    """Resuelve la partida (o unidades funcionales) de una coordenada."""

    settings = _settings(transport)
    coord = Coordinate(lat=lat, lng=lng)

    async def action(service: ParcelService):
        if email:
            return await service.resolve_and_notify(coord, email)
        return await service.resolve_parcel(coord)

    try:
        result = asyncio.run(_with_service(settings, action))
    except PartidasError as exc:
        raise _fail(exc) from exc

    _console.print(build_resolution_panel(result))
    if email:
        _console.print(f"[green]Email enviado a[/green] {email}")
    if output:
        path = export_result_json(coord=coord, payload=resolution_payload(result), output_path=output)
        _console.print(f"[dim]JSON:[/dim] {path}")


@app.command()
def verificar(
    lat: float = typer.Option(..., "--lat", help="Latitud."),
    lng: float = typer.Option(..., "--lng", help="Longitud."),
    transport: Optional[str] = typer.Option(None, "--transport", help="http | browser"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Exportar JSON."),
) -> None:
    """Verifica si la partida de una coordenada sigue activa."""

    settings = _settings(transport)
    coord = Coordinate(lat=lat, lng=lng)

    try:
        result = asyncio.run(_with_service(settings, lambda service: service.verify_existence(coord)))
    except PartidasError as exc:
        raise _fail(exc) from exc

    _console.print(build_existence_panel(result))
    if output:
        path = export_result_json(coord=coord, payload=existence_payload(result), output_path=output)
        _console.print(f"[dim]JSON:[/dim] {path}")


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host"),
    port: Optional[int] = typer.Option(None, "--port"),
    transport: Optional[str] = typer.Option(None, "--transport", help="http | browser"),
) -> None:
    """Levanta la API HTTP (uvicorn)."""

    import uvicorn

    from api.app import create_app

    settings = _settings(transport)
    uvicorn.run(
        create_app(settings),
        host=host or settings.api_host,
        port=port or settings.api_port,
        timeout_graceful_shutdown=15,
    )


def run() -> None:
    app()


if __name__ == "__main__":
    run()
