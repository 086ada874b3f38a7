"""Loop de reintentos compartido por los transportes.

Política:
- Reintenta fallas transitorias (conexión/timeout) y respuestas 5xx.
- Nunca reintenta 4xx: son señales del dominio (p.ej. 402 = partida inexistente)
  y se devuelven tal cual.
- Backoff exponencial con jitter, acotado por el deadline del request.
"""

from __future__ import annotations

import asyncio
import random
from typing import Awaitable, Callable

from loguru import logger

from core.config import AppSettings
from core.deadline import Deadline
from core.domain.errors import DeadlineExceededError, TransportError
from core.domain.models import RawResponse

AttemptFn = Callable[[float], Awaitable[RawResponse]]


def backoff_delay(settings: AppSettings, attempt: int) -> float:
    base = settings.http_backoff_seconds * (2**attempt)
    return base + random.uniform(0.0, settings.http_backoff_seconds * 0.7)


async def run_with_retries(
    attempt_fn: AttemptFn,
    *,
    url: str,
    settings: AppSettings,
    is_transient: Callable[[BaseException], bool],
    deadline: Deadline | None = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> RawResponse:
    """Ejecuta `attempt_fn(timeout)` hasta `http_max_attempts` veces."""

    deadline = deadline or Deadline.unbounded()
    max_attempts = settings.http_max_attempts
    last_error: BaseException | None = None
    last_status: int | None = None

    for attempt in range(max_attempts):
        if deadline.expired:
            raise DeadlineExceededError(url, attempts=attempt)

        timeout = deadline.cap(settings.http_timeout_seconds)
        try:
            response = await attempt_fn(timeout)
        except Exception as exc:
            if not is_transient(exc):
                raise TransportError(url, exc, attempts=attempt + 1) from exc
            last_error, last_status = exc, None
            logger.warning("Intento {}/{} fallido para {}: {!r}", attempt + 1, max_attempts, url, exc)
        else:
            if response.status_code is None or response.status_code < 500:
                return response
            last_error, last_status = None, response.status_code
            logger.warning(
                "Intento {}/{} para {} devolvió HTTP {}", attempt + 1, max_attempts, url, response.status_code
            )

        if attempt + 1 < max_attempts:
            await sleep(deadline.cap(backoff_delay(settings, attempt)))

    if deadline.expired:
        raise DeadlineExceededError(url, attempts=max_attempts)
    raise TransportError(url, last_error, status_code=last_status, attempts=max_attempts) from last_error
