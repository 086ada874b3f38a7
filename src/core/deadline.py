"""Deadline de punta a punta para un request.

Un request encadena varias llamadas upstream (consulta catastral, unidades
funcionales, comprobante de deuda). Cada intento tiene su propio timeout, pero
sin un presupuesto común la latencia total puede acumularse sin límite.
`Deadline` se crea una vez por request y viaja por todos los `fetch`.
"""

from __future__ import annotations

import time


class Deadline:
    """Presupuesto de tiempo restante (reloj monotónico).

    `Deadline(None)` no impone límite.
    """

    def __init__(self, seconds: float | None, *, clock=time.monotonic) -> None:
        self._clock = clock
        self._expires_at = None if seconds is None else clock() + seconds

    @classmethod
    def unbounded(cls) -> "Deadline":
        return cls(None)

    def remaining(self) -> float | None:
        if self._expires_at is None:
            return None
        return max(0.0, self._expires_at - self._clock())

    @property
    def expired(self) -> bool:
        remaining = self.remaining()
        return remaining is not None and remaining <= 0.0

    def cap(self, seconds: float) -> float:
        """Acota `seconds` al tiempo restante."""

        remaining = self.remaining()
        if remaining is None:
            return seconds
        return min(seconds, remaining)
