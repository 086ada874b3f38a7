"""Mapeo de errores del dominio a respuestas HTTP.

Cada tipo de falla tiene un status distinto para que el caller distinga
"upstream inalcanzable" de "partida inexistente" de "notificación fallida".
"""

from __future__ import annotations

import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from loguru import logger

from core.domain.errors import (
    DeadlineExceededError,
    NotificationError,
    ResolutionError,
    TransportError,
    VerificationError,
)


def _generate_error_id() -> str:
    return uuid.uuid4().hex[:8]


async def resolution_error_handler(request: Request, exc: ResolutionError) -> JSONResponse:
    logger.warning("No se pudo resolver la partida ({}) - {}", exc.kind.value, request.url.path)
    return JSONResponse(
        status_code=404,
        content={
            "error": "No se pudo obtener el número de partida matriz o datos de propiedad horizontal.",
            "reason": exc.kind.value,
        },
    )


async def notification_error_handler(request: Request, exc: NotificationError) -> JSONResponse:
    error_id = _generate_error_id()
    logger.error("Error enviando email [ID: {}]: {!r}", error_id, exc.cause)
    content: dict[str, object] = {"error": "No se pudo enviar el email", "error_id": error_id}
    if exc.result is not None:
        content["pdamatriz"] = exc.result.payload()
    return JSONResponse(status_code=502, content=content)


async def verification_error_handler(request: Request, exc: VerificationError) -> JSONResponse:
    error_id = _generate_error_id()
    logger.error("Error en la verificación [ID: {}]: {} ({!r})", error_id, exc.reason, exc.cause)
    return JSONResponse(
        status_code=502,
        content={"error": "Error verificando la existencia de la partida", "error_id": error_id},
    )


async def deadline_error_handler(request: Request, exc: DeadlineExceededError) -> JSONResponse:
    error_id = _generate_error_id()
    logger.error("Deadline agotado [ID: {}]: {}", error_id, exc)
    return JSONResponse(
        status_code=504,
        content={"error": "Tiempo de espera agotado consultando servicios externos", "error_id": error_id},
    )


async def transport_error_handler(request: Request, exc: TransportError) -> JSONResponse:
    error_id = _generate_error_id()
    logger.error("Error en el proceso [ID: {}]: {}", error_id, exc)
    return JSONResponse(
        status_code=502,
        content={"error": "Error procesando la solicitud", "error_id": error_id},
    )


def register_exception_handlers(app: FastAPI) -> None:
    # Starlette resuelve por MRO: DeadlineExceededError gana sobre TransportError.
    app.add_exception_handler(ResolutionError, resolution_error_handler)
    app.add_exception_handler(NotificationError, notification_error_handler)
    app.add_exception_handler(VerificationError, verification_error_handler)
    app.add_exception_handler(DeadlineExceededError, deadline_error_handler)
    app.add_exception_handler(TransportError, transport_error_handler)
