"""Taxonomía de errores del dominio.

Cada clase distingue un tipo de falla que el caller necesita reportar distinto:
upstream inalcanzable, upstream alcanzable pero sin datos, verificación
inconclusa y notificación fallida.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from core.domain.models import ResolutionResult


class PartidasError(Exception):
    """Base de todos los errores del servicio."""


class TransportError(PartidasError):
    """Falla de red/timeout (o 5xx) luego de agotar los reintentos."""

    def __init__(
        self,
        url: str,
        cause: BaseException | None = None,
        *,
        status_code: int | None = None,
        attempts: int = 0,
    ) -> None:
        self.url = url
        self.cause = cause
        self.status_code = status_code
        self.attempts = attempts
        detail = f"status {status_code}" if status_code is not None else repr(cause)
        super().__init__(f"fetch failed for {url} after {attempts} attempt(s): {detail}")


class DeadlineExceededError(TransportError):
    """Se agotó el presupuesto de tiempo del request."""

    def __init__(self, url: str, *, attempts: int = 0) -> None:
        super().__init__(url, None, attempts=attempts)
        self.args = (f"request deadline exceeded before fetching {url}",)


class ResolutionFailure(str, Enum):
    EMPTY_RESPONSE = "empty_response"
    NO_DATA = "no_data"


class ResolutionError(PartidasError):
    """El catastro respondió pero sin la forma esperada."""

    def __init__(self, kind: ResolutionFailure, detail: str = "") -> None:
        self.kind = kind
        self.detail = detail
        super().__init__(f"{kind.value}: {detail}" if detail else kind.value)

    @classmethod
    def empty_response(cls, detail: str = "") -> "ResolutionError":
        return cls(ResolutionFailure.EMPTY_RESPONSE, detail)

    @classmethod
    def no_data(cls, detail: str = "") -> "ResolutionError":
        return cls(ResolutionFailure.NO_DATA, detail)


class VerificationError(PartidasError):
    """La verificación no pudo concluir (distinto de un `DoesNotExist` confirmado)."""

    def __init__(self, reason: str, cause: BaseException | None = None) -> None:
        self.reason = reason
        self.cause = cause
        super().__init__(reason)


class NotificationError(PartidasError):
    """Falló el envío del email; la resolución sí fue exitosa."""

    def __init__(
        self,
        recipient: str,
        cause: BaseException | None = None,
        *,
        result: "ResolutionResult | None" = None,
    ) -> None:
        self.recipient = recipient
        self.cause = cause
        self.result = result
        super().__init__(f"could not notify {recipient}: {cause!r}")
