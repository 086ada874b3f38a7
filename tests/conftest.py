from __future__ import annotations

import json
from typing import Any

import pytest

from core.config import AppSettings
from core.domain.models import Coordinate, RawResponse

CATASTRO_URL = "https://catastro.test/parcela/"
DEUDA_TEMPLATE = "https://deuda.test/abl?partida={partida}"


def json_response(url: str, payload: Any, *, status: int = 200) -> RawResponse:
    return RawResponse(
        url=url,
        status_code=status,
        content_type="application/json",
        text=json.dumps(payload),
        content=json.dumps(payload).encode(),
    )


def html_response(url: str, text: str, *, status: int = 200) -> RawResponse:
    return RawResponse(url=url, status_code=status, content_type="text/html; charset=utf-8", text=text)


def pdf_response(url: str) -> RawResponse:
    return RawResponse(url=url, status_code=200, content_type="application/pdf", content=b"%PDF-1.4 ...")


class FakeTransport:
    """Transporte en memoria: URL -> respuesta (o excepción a lanzar)."""

    def __init__(self, responses: dict[str, Any] | None = None, *, default: Any = None) -> None:
        self.responses = dict(responses or {})
        self.default = default
        self.calls: list[str] = []
        self.deadlines: list[Any] = []

    async def fetch(self, url: str, *, deadline=None) -> RawResponse:
        self.calls.append(url)
        self.deadlines.append(deadline)
        value = self.responses.get(url, self.default)
        if value is None:
            raise AssertionError(f"unexpected fetch: {url}")
        if isinstance(value, BaseException):
            raise value
        return value


class FakeNotifier:
    def __init__(self, error: BaseException | None = None) -> None:
        self.error = error
        self.sent: list[tuple[str, Any]] = []

    async def notify(self, recipient: str, result) -> None:
        if self.error is not None:
            raise self.error
        self.sent.append((recipient, result))


@pytest.fixture
def settings() -> AppSettings:
    return AppSettings(
        _env_file=None,
        http_timeout_seconds=1.0,
        http_max_attempts=2,
        http_backoff_seconds=0.0,
        request_deadline_seconds=None,
        catastro_url=CATASTRO_URL,
        deuda_url_template=DEUDA_TEMPLATE,
        smtp_host="smtp.test",
        smtp_port=587,
        smtp_user="user",
        smtp_password="secret",
    )


@pytest.fixture
def strict_settings(settings: AppSettings) -> AppSettings:
    return settings.model_copy(update={"probe_optimistic_default": False})


@pytest.fixture
def coord() -> Coordinate:
    return Coordinate(lat=-34.6037, lng=-58.3816)
