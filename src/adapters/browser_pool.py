"""Navegador headless compartido (Playwright).

Por qué un pool explícito:
- Lanzar Chromium por request es caro; se lanza una vez, en el primer uso.
- Cada fetch obtiene un contexto+página aislados que se cierran siempre, aun
  ante excepciones.
- El dueño (lifespan de la API o comando de la CLI) llama a `close()` al salir.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from loguru import logger
from playwright.async_api import Browser, Page, Playwright, async_playwright

from core.config import AppSettings


class BrowserPool:
    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._lock = asyncio.Lock()

    @property
    def started(self) -> bool:
        return self._browser is not None

    async def _ensure_browser(self) -> Browser:
        if self._browser is not None:
            return self._browser
        async with self._lock:
            if self._browser is None:
                logger.info("Iniciando navegador headless (headless={})", self._settings.browser_headless)
                self._playwright = await async_playwright().start()
                try:
                    self._browser = await self._playwright.chromium.launch(
                        headless=self._settings.browser_headless,
                        args=["--no-sandbox", "--disable-dev-shm-usage"],
                    )
                except Exception:
                    await self._playwright.stop()
                    self._playwright = None
                    raise
        return self._browser

    @asynccontextmanager
    async def page(self) -> AsyncIterator[Page]:
        """Página nueva en un contexto aislado; se cierra al salir del bloque."""

        browser = await self._ensure_browser()
        context = await browser.new_context(locale="es-AR")
        try:
            page = await context.new_page()
            yield page
        finally:
            await context.close()

    async def close(self) -> None:
        async with self._lock:
            if self._browser is not None:
                await self._browser.close()
            if self._playwright is not None:
                await self._playwright.stop()
            if self._browser is not None or self._playwright is not None:
                logger.info("Navegador headless cerrado")
            self._browser = None
            self._playwright = None
