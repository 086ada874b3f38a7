"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI ni la API.
- Permite que adaptadores (HTTP/navegador/SMTP) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEUDA_URL_TEMPLATE = (
    "https://lb.agip.gob.ar/ConsultaABL/comprobante/ESTADO-DEUDA-ABL-734456.pdf"
    "?boletasSeleccionadas=&identificadorPDF={partida}&dvPDF=4&fechaInicioPDF="
)


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "consulta-partidas"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "consulta-partidas"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "consulta-partidas"
    return Path.home() / ".config" / "consulta-partidas"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


def _parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_user_env_vars(values: dict[str, str], *, env_path: Path | None = None) -> Path:
    """Escribe/actualiza variables en el .env global del usuario.

    Las claves existentes que no vienen en `values` se conservan.
    """

    env_path = env_path or get_user_env_file()
    env_path.parent.mkdir(parents=True, exist_ok=True)

    existing: dict[str, str] = {}
    if env_path.exists():
        existing = _parse_env_lines(env_path.read_text(encoding="utf-8"))

    existing.update({k: v for k, v in values.items() if v is not None})

    lines = ["# consulta-partidas user config (.env)"]
    for key in sorted(existing.keys()):
        lines.append(f"{key}={existing[key]}")
    env_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return env_path


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI, API y adaptadores.
    """

    model_config = SettingsConfigDict(
        env_prefix="PARTIDAS_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    # Transporte
    http_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        le=120,
        description="Timeout por intento (segundos).",
    )
    http_max_attempts: int = Field(
        default=5,
        ge=1,
        le=10,
        description="Intentos totales por fetch (1 = sin reintentos).",
    )
    http_backoff_seconds: float = Field(
        default=0.5,
        ge=0,
        description="Base del backoff exponencial entre intentos.",
    )
    request_deadline_seconds: float | None = Field(
        default=60.0,
        gt=0,
        description="Presupuesto total por request (todas las llamadas upstream). None = sin límite.",
    )
    user_agent: str = Field(
        default="consulta-partidas/0.1 (+https://proprop.com.ar)",
        min_length=1,
        description="User-Agent para peticiones HTTP.",
    )
    transport: Literal["http", "browser"] = Field(
        default="http",
        description="Implementación de transporte: HTTP directo o página renderizada.",
    )

    # Navegador (solo transporte 'browser')
    browser_headless: bool = Field(default=True)
    browser_blocked_resources: list[str] = Field(
        default_factory=lambda: ["image", "stylesheet", "font", "media"],
        description="Tipos de sub-recursos que se abortan al renderizar.",
    )

    # Upstream
    catastro_url: str = Field(
        default="https://epok.buenosaires.gob.ar/catastro/parcela/",
        min_length=8,
        description="Endpoint de consulta catastral por coordenadas.",
    )
    deuda_url_template: str = Field(
        default=DEUDA_URL_TEMPLATE,
        min_length=8,
        description="URL del comprobante de deuda ABL; `{partida}` se reemplaza por la partida matriz.",
    )
    probe_not_found_status: int = Field(
        default=402,
        ge=100,
        le=599,
        description="Código que el servicio de deuda usa para 'partida inexistente'.",
    )
    probe_error_markers: list[str] = Field(
        default_factory=lambda: [
            "La partida ingresada no existe",
            "Partida inexistente",
            "Partida dada de baja",
        ],
        description="Textos de error del servicio de deuda que indican partida inexistente.",
    )
    probe_optimistic_default: bool = Field(
        default=True,
        description="Sin señal negativa se asume que la partida existe (comportamiento histórico).",
    )

    # Notificación
    smtp_host: str = Field(default="smtp-relay.brevo.com", min_length=1)
    smtp_port: int = Field(default=465, ge=1, le=65535)
    smtp_user: str | None = Field(default=None)
    smtp_password: str | None = Field(default=None)
    smtp_timeout_seconds: float = Field(default=15.0, gt=0)
    mail_from: str = Field(default='"PROPROP" <ricardo@proprop.com.ar>')
    mail_bcc: str | None = Field(default="info@proprop.com.ar")
    mail_subject: str = Field(default="Consulta de ABL")

    # API
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=3000, ge=1, le=65535)

    # Logging
    log_level: str = Field(default="INFO")
    log_json: bool = Field(default=False, description="Emitir logs serializados (JSON).")
