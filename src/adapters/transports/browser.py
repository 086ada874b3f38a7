"""Transporte por página renderizada (Playwright).

Se usa cuando el fetch HTTP directo es bloqueado. Carga la URL en una página
aislada del `BrowserPool`, aborta sub-recursos pesados (imágenes, CSS, fuentes)
y devuelve el texto renderizado del body. Para el Core la respuesta es
indistinguible de la del transporte HTTP.
"""

from __future__ import annotations

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page, Route

from adapters.browser_pool import BrowserPool
from adapters.transports.retry import run_with_retries
from core.config import AppSettings
from core.deadline import Deadline
from core.domain.models import RawResponse, is_pdf_content_type

# Chromium no renderiza un PDF en headless: la navegación se convierte en descarga.
_DOWNLOAD_MARKER = "Download is starting"


def is_transient_browser_error(exc: BaseException) -> bool:
    # playwright TimeoutError hereda de Error; net::ERR_* también llegan como Error.
    return isinstance(exc, PlaywrightError)


class BrowserTransport:
    """Implementa `core.interfaces.transport.Transport` con un navegador headless."""

    def __init__(self, pool: BrowserPool, settings: AppSettings | None = None) -> None:
        self._pool = pool
        self._settings = settings or AppSettings()
        self._blocked = frozenset(self._settings.browser_blocked_resources)

    async def fetch(self, url: str, *, deadline: Deadline | None = None) -> RawResponse:
        async def attempt(timeout: float) -> RawResponse:
            async with self._pool.page() as page:
                return await self._render(page, url, timeout)

        return await run_with_retries(
            attempt,
            url=url,
            settings=self._settings,
            is_transient=is_transient_browser_error,
            deadline=deadline,
        )

    async def _block_resources(self, route: Route) -> None:
        if route.request.resource_type in self._blocked:
            await route.abort()
        else:
            await route.continue_()

    async def _render(self, page: Page, url: str, timeout: float) -> RawResponse:
        timeout_ms = timeout * 1000
        await page.route("**/*", self._block_resources)

        try:
            response = await page.goto(url, wait_until="domcontentloaded", timeout=timeout_ms)
        except PlaywrightError as exc:
            if _DOWNLOAD_MARKER not in str(exc):
                raise
            return await self._fetch_binary(page, url, timeout_ms)

        status = response.status if response is not None else None
        content_type = response.headers.get("content-type") if response is not None else None
        if response is not None and is_pdf_content_type(content_type):
            body = await response.body()
            return RawResponse(url=page.url, status_code=status, content_type=content_type, content=body)

        text = await page.inner_text("body")
        return RawResponse(url=page.url, status_code=status, content_type=content_type, text=text)

    async def _fetch_binary(self, page: Page, url: str, timeout_ms: float) -> RawResponse:
        # Mismo contexto (cookies) que la página, sin pasar por el visor.
        api_response = await page.request.get(url, timeout=timeout_ms)
        try:
            content_type = api_response.headers.get("content-type")
            body = await api_response.body()
            return RawResponse(
                url=api_response.url,
                status_code=api_response.status,
                content_type=content_type,
                text="" if is_pdf_content_type(content_type) else body.decode("utf-8", errors="replace"),
                content=body,
            )
        finally:
            await api_response.dispose()
