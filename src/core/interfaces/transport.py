"""Contrato de transporte (fetch resiliente).

Por qué Protocol:
- HTTP directo y página renderizada son intercambiables para el Core.
- Los tests usan un transporte falso sin tocar la red.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.deadline import Deadline
from core.domain.models import RawResponse


@runtime_checkable
class Transport(Protocol):
    """Contrato mínimo de un transporte.

    Reglas de diseño:
    - `fetch` devuelve la respuesta aunque sea 4xx: esos códigos son señales del dominio.
    - Reintenta solo fallas de conexión/timeout y 5xx; al agotarse lanza `TransportError`.
    - Respeta el `deadline` del request si se provee.
    """

    async def fetch(self, url: str, *, deadline: Deadline | None = None) -> RawResponse:
        ...
