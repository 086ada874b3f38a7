from __future__ import annotations

import pytest
import typer
from typer.testing import CliRunner

import cli.main as cli_main
from conftest import FakeTransport, json_response, pdf_response
from core.domain.errors import TransportError

runner = CliRunner()


class _RoutingTransport:
    """JSON catastral para URLs del catastro; PDF de deuda para el resto."""

    def __init__(self, catastro_url: str) -> None:
        self._catastro_url = catastro_url

    async def fetch(self, url, *, deadline=None):
        if url.startswith(self._catastro_url):
            return json_response(url, {"propiedad_horizontal": "No", "pdamatriz": "123456"})
        return pdf_response(url)


def test_rejects_unknown_transport():
    with pytest.raises(typer.BadParameter):
        cli_main._settings("ftp")


def test_verificar_prints_result(monkeypatch):
    monkeypatch.setattr(
        cli_main,
        "build_transport",
        lambda settings, pool=None: _RoutingTransport(settings.catastro_url),
    )

    result = runner.invoke(cli_main.app, ["--quiet", "verificar", "--lat=-34.6", "--lng=-58.4"])

    assert result.exit_code == 0, result.output
    assert "La partida existe" in result.output


def test_resolver_exports_json(monkeypatch, tmp_path):
    monkeypatch.setattr(
        cli_main,
        "build_transport",
        lambda settings, pool=None: _RoutingTransport(settings.catastro_url),
    )
    output = tmp_path / "partida.json"

    result = runner.invoke(
        cli_main.app,
        ["--quiet", "resolver", "--lat=-34.6", "--lng=-58.4", "--output", str(output)],
    )

    assert result.exit_code == 0, result.output
    assert '"pdamatriz": "123456"' in output.read_text(encoding="utf-8")


def test_transport_failure_exit_code(monkeypatch):
    error = TransportError("https://catastro.test", TimeoutError(), attempts=2)
    monkeypatch.setattr(cli_main, "build_transport", lambda settings, pool=None: FakeTransport(default=error))

    result = runner.invoke(cli_main.app, ["--quiet", "resolver", "--lat=-34.6", "--lng=-58.4"])

    assert result.exit_code == 6
