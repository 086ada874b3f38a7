from __future__ import annotations

from core.config import AppSettings, write_user_env_vars


def test_write_user_env_vars_merges_existing(tmp_path):
    env_path = tmp_path / "cfg" / ".env"
    env_path.parent.mkdir()
    env_path.write_text('# comentario\nPARTIDAS_SMTP_HOST="old.host"\nPARTIDAS_LOG_LEVEL=DEBUG\n', encoding="utf-8")

    written = write_user_env_vars({"PARTIDAS_SMTP_HOST": "smtp.new", "PARTIDAS_SMTP_PORT": "587"}, env_path=env_path)

    lines = written.read_text(encoding="utf-8").splitlines()
    assert "PARTIDAS_SMTP_HOST=smtp.new" in lines
    assert "PARTIDAS_SMTP_PORT=587" in lines
    assert "PARTIDAS_LOG_LEVEL=DEBUG" in lines


def test_write_user_env_vars_creates_parent(tmp_path):
    env_path = tmp_path / "nuevo" / ".env"

    write_user_env_vars({"PARTIDAS_TRANSPORT": "browser"}, env_path=env_path)

    assert env_path.exists()


def test_settings_read_prefixed_env(monkeypatch):
    monkeypatch.setenv("PARTIDAS_HTTP_MAX_ATTEMPTS", "3")
    monkeypatch.setenv("PARTIDAS_TRANSPORT", "browser")
    monkeypatch.setenv("PARTIDAS_PROBE_OPTIMISTIC_DEFAULT", "false")

    settings = AppSettings(_env_file=None)

    assert settings.http_max_attempts == 3
    assert settings.transport == "browser"
    assert settings.probe_optimistic_default is False


def test_settings_defaults():
    settings = AppSettings(_env_file=None)

    assert settings.probe_not_found_status == 402
    assert settings.api_port == 3000
    assert "{partida}" in settings.deuda_url_template
