"""Transportes concretos (HTTP directo / página renderizada).

Cada módulo implementa `core.interfaces.transport.Transport`; se elige uno al
construir el servicio según `AppSettings.transport`.
"""

from __future__ import annotations

from adapters.browser_pool import BrowserPool
from adapters.transports.browser import BrowserTransport
from adapters.transports.http import HttpTransport
from core.config import AppSettings
from core.interfaces.transport import Transport


def build_transport(settings: AppSettings, pool: BrowserPool | None = None) -> Transport:
    """Devuelve el transporte configurado.

    El transporte `browser` requiere el pool que lo posee el caller (para poder
    cerrarlo en el shutdown).
    """

    if settings.transport == "browser":
        if pool is None:
            raise ValueError("browser transport requires a BrowserPool")
        return BrowserTransport(pool, settings)
    return HttpTransport(settings)


__all__ = [
    "BrowserTransport",
    "HttpTransport",
    "build_transport",
]
