"""Contrato de notificación al solicitante."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from core.domain.models import ResolutionResult


@runtime_checkable
class Notifier(Protocol):
    async def notify(self, recipient: str, result: ResolutionResult) -> None:
        """Envía el resultado; ante falla lanza `NotificationError`."""

        ...
