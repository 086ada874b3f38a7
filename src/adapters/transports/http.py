"""Transporte HTTP directo (httpx)."""

from __future__ import annotations

from typing import Callable

import httpx

from adapters.http_client import build_async_client
from adapters.transports.retry import run_with_retries
from core.config import AppSettings
from core.deadline import Deadline
from core.domain.models import RawResponse, is_pdf_content_type


def is_transient_http_error(exc: BaseException) -> bool:
    # TimeoutException, ConnectError, ReadError, RemoteProtocolError... (todas TransportError)
    return isinstance(exc, httpx.TransportError)


class HttpTransport:
    """Implementa `core.interfaces.transport.Transport` con httpx."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        client_factory: Callable[[AppSettings], httpx.AsyncClient] = build_async_client,
    ) -> None:
        self._settings = settings or AppSettings()
        self._client_factory = client_factory

    async def fetch(self, url: str, *, deadline: Deadline | None = None) -> RawResponse:
        async def attempt(timeout: float) -> RawResponse:
            async with self._client_factory(self._settings) as client:
                response = await client.get(url, timeout=timeout)
            return _to_raw_response(response)

        return await run_with_retries(
            attempt,
            url=url,
            settings=self._settings,
            is_transient=is_transient_http_error,
            deadline=deadline,
        )


def _to_raw_response(response: httpx.Response) -> RawResponse:
    content_type = response.headers.get("content-type")
    return RawResponse(
        url=str(response.url),
        status_code=response.status_code,
        content_type=content_type,
        text="" if is_pdf_content_type(content_type) else response.text,
        content=response.content,
    )
