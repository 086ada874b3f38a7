"""Notificación por email (SMTP).

Por qué está en adapters:
- SMTP y el render HTML (Jinja2) son detalles de infraestructura.
- El Core solo conoce `ResolutionResult` y el contrato `Notifier`.
"""

from __future__ import annotations

import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, select_autoescape
from loguru import logger

from core.config import AppSettings
from core.domain.errors import NotificationError
from core.domain.models import MultipleResolution, ResolutionResult

_TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

LOGO_URL = "https://proprop.com.ar/wp-content/uploads/2024/06/Logo-email.jpg"
AGIP_URL = "https://lb.agip.gob.ar/ConsultaABL/"


def _get_env() -> Environment:
    return Environment(
        loader=FileSystemLoader(str(_TEMPLATES_DIR)),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_email(result: ResolutionResult) -> tuple[str, str]:
    """Devuelve `(texto_plano, html)` para el resultado."""

    env = _get_env()
    context = {
        "partida": getattr(result, "matrix_parcel_id", None),
        "sub_units": list(result.sub_units) if isinstance(result, MultipleResolution) else [],
        "logo_url": LOGO_URL,
        "agip_url": AGIP_URL,
    }
    text = env.get_template("email_resultado.txt").render(**context)
    html = env.get_template("email_resultado.html").render(**context)
    return text, html


def build_message(settings: AppSettings, recipient: str, result: ResolutionResult) -> MIMEMultipart:
    text, html = render_email(result)
    msg = MIMEMultipart("alternative")
    msg["Subject"] = settings.mail_subject
    msg["From"] = settings.mail_from
    msg["To"] = recipient
    if settings.mail_bcc:
        # send_message() lo agrega a los destinatarios y no lo transmite.
        msg["Bcc"] = settings.mail_bcc
    msg.attach(MIMEText(text, "plain", "utf-8"))
    msg.attach(MIMEText(html, "html", "utf-8"))
    return msg


class SmtpNotifier:
    """Implementa `core.interfaces.notifier.Notifier` vía smtplib.

    Sin reintentos: una falla se reporta al caller como `NotificationError`.
    """

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    async def notify(self, recipient: str, result: ResolutionResult) -> None:
        msg = build_message(self._settings, recipient, result)
        try:
            await asyncio.to_thread(self._send, msg)
        except (smtplib.SMTPException, OSError) as exc:
            logger.error("Error enviando email a {}: {!r}", recipient, exc)
            raise NotificationError(recipient, exc, result=result) from exc

    def _send(self, msg: MIMEMultipart) -> None:
        s = self._settings
        if s.smtp_port == 465:
            server: smtplib.SMTP = smtplib.SMTP_SSL(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout_seconds)
        else:
            server = smtplib.SMTP(s.smtp_host, s.smtp_port, timeout=s.smtp_timeout_seconds)
        with server:
            if s.smtp_port != 465:
                server.starttls()
            if s.smtp_user and s.smtp_password:
                server.login(s.smtp_user, s.smtp_password)
            server.send_message(msg)
