from __future__ import annotations

from contextlib import asynccontextmanager

import pytest
from playwright.async_api import Error as PlaywrightError

import adapters.browser_pool as browser_pool_module
from adapters.browser_pool import BrowserPool
from adapters.transports.browser import BrowserTransport
from core.domain.errors import TransportError
from core.domain.models import is_pdf_content_type

URL = "https://deuda.test/abl?partida=123456"


class FakeResponse:
    def __init__(self, status=200, content_type="text/html", body=b"") -> None:
        self.status = status
        self.headers = {"content-type": content_type}
        self.url = URL
        self._body = body
        self.disposed = False

    async def body(self) -> bytes:
        return self._body

    async def dispose(self) -> None:
        self.disposed = True


class FakeRequestContext:
    def __init__(self, response: FakeResponse) -> None:
        self.response = response

    async def get(self, url, timeout=None):
        return self.response


class FakePage:
    def __init__(self, *, response=None, goto_error=None, text="", api_response=None) -> None:
        self.url = URL
        self._response = response
        self._goto_error = goto_error
        self._text = text
        self.request = FakeRequestContext(api_response or FakeResponse())
        self.routes = []

    async def route(self, pattern, handler) -> None:
        self.routes.append(pattern)

    async def goto(self, url, wait_until=None, timeout=None):
        if self._goto_error is not None:
            raise self._goto_error
        return self._response

    async def inner_text(self, selector: str) -> str:
        return self._text


class FakePool:
    def __init__(self, page: FakePage) -> None:
        self._page = page
        self.opened = 0
        self.closed = 0

    @asynccontextmanager
    async def page(self):
        self.opened += 1
        try:
            yield self._page
        finally:
            self.closed += 1


@pytest.mark.asyncio
async def test_renders_html_body_text(settings):
    page = FakePage(response=FakeResponse(status=200), text='{"statusCode":402}')
    pool = FakePool(page)

    response = await BrowserTransport(pool, settings).fetch(URL)

    assert response.status_code == 200
    assert response.text == '{"statusCode":402}'
    assert page.routes == ["**/*"]
    assert pool.closed == 1


@pytest.mark.asyncio
async def test_pdf_navigation_returns_bytes(settings):
    page = FakePage(response=FakeResponse(content_type="application/pdf", body=b"%PDF"))

    response = await BrowserTransport(FakePool(page), settings).fetch(URL)

    assert is_pdf_content_type(response.content_type)
    assert response.content == b"%PDF"
    assert response.text == ""


@pytest.mark.asyncio
async def test_download_falls_back_to_request_context(settings):
    api_response = FakeResponse(content_type="application/pdf", body=b"%PDF")
    page = FakePage(goto_error=PlaywrightError("Download is starting"), api_response=api_response)

    response = await BrowserTransport(FakePool(page), settings).fetch(URL)

    assert is_pdf_content_type(response.content_type)
    assert response.content == b"%PDF"
    assert api_response.disposed


@pytest.mark.asyncio
async def test_navigation_errors_are_retried_and_pages_closed(settings):
    page = FakePage(goto_error=PlaywrightError("net::ERR_CONNECTION_RESET"))
    pool = FakePool(page)

    with pytest.raises(TransportError) as excinfo:
        await BrowserTransport(pool, settings).fetch(URL)

    assert excinfo.value.attempts == settings.http_max_attempts
    assert pool.opened == pool.closed == settings.http_max_attempts


@pytest.mark.asyncio
async def test_blocks_heavy_resources(settings):
    transport = BrowserTransport(FakePool(FakePage()), settings)
    actions = []

    class Route:
        def __init__(self, resource_type):
            self.request = type("Req", (), {"resource_type": resource_type})()

        async def abort(self):
            actions.append(("abort", self.request.resource_type))

        async def continue_(self):
            actions.append(("continue", self.request.resource_type))

    await transport._block_resources(Route("image"))
    await transport._block_resources(Route("document"))

    assert actions == [("abort", "image"), ("continue", "document")]


class _FakeContext:
    def __init__(self) -> None:
        self.closed = False

    async def new_page(self):
        return object()

    async def close(self) -> None:
        self.closed = True


class _FakeBrowser:
    def __init__(self) -> None:
        self.contexts: list[_FakeContext] = []
        self.closed = False

    async def new_context(self, **kwargs):
        context = _FakeContext()
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.closed = True


class _FakePlaywright:
    def __init__(self) -> None:
        self.browser = _FakeBrowser()
        self.launches = 0
        self.stopped = False
        playwright = self

        class Chromium:
            async def launch(self, **kwargs):
                playwright.launches += 1
                return playwright.browser

        self.chromium = Chromium()

    async def stop(self) -> None:
        self.stopped = True


@pytest.fixture
def fake_playwright(monkeypatch):
    fake = _FakePlaywright()

    class Starter:
        async def start(self):
            return fake

    monkeypatch.setattr(browser_pool_module, "async_playwright", lambda: Starter())
    return fake


@pytest.mark.asyncio
async def test_pool_launches_once_and_closes_contexts(settings, fake_playwright):
    pool = BrowserPool(settings)
    assert not pool.started

    async with pool.page():
        pass
    with pytest.raises(RuntimeError):
        async with pool.page():
            raise RuntimeError("boom")

    assert pool.started
    assert fake_playwright.launches == 1
    assert [c.closed for c in fake_playwright.browser.contexts] == [True, True]

    await pool.close()
    await pool.close()

    assert fake_playwright.browser.closed
    assert fake_playwright.stopped
    assert not pool.started
