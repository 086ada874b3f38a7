"""FastAPI application entry point."""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from adapters.browser_pool import BrowserPool
from adapters.email_notifier import SmtpNotifier
from adapters.transports import build_transport
from api.errors import register_exception_handlers
from api.routes import router
from core.config import AppSettings
from core.services.parcel_service import ParcelService


def create_app(settings: AppSettings | None = None, service: ParcelService | None = None) -> FastAPI:
    """Construye la app.

    Sin `service`, el lifespan arma transporte (y navegador, si corresponde) y
    notificador a partir de `settings`, y cierra el navegador en el shutdown.
    """

    settings = settings or AppSettings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        pool: BrowserPool | None = None
        if service is None:
            pool = BrowserPool(settings) if settings.transport == "browser" else None
            app.state.parcel_service = ParcelService(
                transport=build_transport(settings, pool),
                settings=settings,
                notifier=SmtpNotifier(settings),
            )
        try:
            yield
        finally:
            if pool is not None:
                await pool.close()

    app = FastAPI(
        title="Consulta de partidas ABL",
        description="Resuelve la partida de una coordenada y verifica su existencia.",
        version="0.1.0",
        lifespan=lifespan,
    )
    if service is not None:
        app.state.parcel_service = service

    register_exception_handlers(app)
    app.include_router(router)
    return app
