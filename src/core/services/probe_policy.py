"""Política de interpretación del comprobante de deuda.

El servicio de deuda es inconsistente: según la variante responde un PDF, una
página HTML/JS renderizada o un sobre JSON de error, y todas representan los
mismos dos resultados (existe / no existe). En vez de ramificar por variante,
la respuesta se normaliza a `ProbeOutcome` y se evalúa contra una lista
ordenada de reglas: gana la primera que matchea. Una rareza nueva del upstream
es una regla nueva.
"""

from __future__ import annotations

import html
import re
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Sequence

from core.config import AppSettings
from core.domain.models import ProbeOutcome, is_pdf_content_type


class ProbeVerdict(str, Enum):
    EXISTS = "exists"
    DOES_NOT_EXIST = "does_not_exist"
    INDETERMINATE = "indeterminate"


@dataclass(frozen=True)
class ProbeRule:
    name: str
    verdict: ProbeVerdict
    matches: Callable[[ProbeOutcome], bool]


@dataclass(frozen=True)
class ProbeDecision:
    rule: str
    verdict: ProbeVerdict


OPTIMISTIC_DEFAULT_RULE = "optimistic_default"


def _is_pdf(outcome: ProbeOutcome) -> bool:
    return is_pdf_content_type(outcome.content_type)


def _is_success_status(outcome: ProbeOutcome) -> bool:
    return outcome.status_code is None or 200 <= outcome.status_code < 300


def _readable_text(outcome: ProbeOutcome) -> str:
    # Las páginas HTML pueden traer el JSON escapado (&quot;statusCode&quot;).
    return html.unescape(outcome.body_text or "")


def status_marker_rule(status: int) -> ProbeRule:
    pattern = re.compile(r'"statusCode"\s*:\s*"?%d(?!\d)' % status)
    return ProbeRule(
        name="embedded_status_marker",
        verdict=ProbeVerdict.DOES_NOT_EXIST,
        matches=lambda outcome: bool(pattern.search(_readable_text(outcome))),
    )


def error_text_rule(markers: Sequence[str]) -> ProbeRule:
    folded = [m.casefold() for m in markers if m.strip()]

    def matches(outcome: ProbeOutcome) -> bool:
        text = _readable_text(outcome).casefold()
        return any(marker in text for marker in folded)

    return ProbeRule(name="embedded_error_text", verdict=ProbeVerdict.DOES_NOT_EXIST, matches=matches)


def http_status_rule(status: int) -> ProbeRule:
    return ProbeRule(
        name="http_status_not_found",
        verdict=ProbeVerdict.DOES_NOT_EXIST,
        matches=lambda outcome: outcome.status_code == status,
    )


def default_rules(settings: AppSettings) -> list[ProbeRule]:
    """Reglas en orden de evaluación.

    1. PDF => existe.
    2. Marcador `"statusCode":402` embebido => no existe.
    3. Texto de error conocido del upstream => no existe.
    4. HTTP 402 => no existe.
    5. Fallback: sin señal negativa, existe. Con `probe_optimistic_default=False`
       un status no-2xx sin clasificar queda `INDETERMINATE`.
    """

    rules = [
        ProbeRule(name="pdf_document", verdict=ProbeVerdict.EXISTS, matches=_is_pdf),
        status_marker_rule(settings.probe_not_found_status),
        error_text_rule(settings.probe_error_markers),
        http_status_rule(settings.probe_not_found_status),
    ]
    if not settings.probe_optimistic_default:
        rules.append(
            ProbeRule(
                name="unclassified_error_status",
                verdict=ProbeVerdict.INDETERMINATE,
                matches=lambda outcome: not _is_success_status(outcome),
            )
        )
    rules.append(
        ProbeRule(name=OPTIMISTIC_DEFAULT_RULE, verdict=ProbeVerdict.EXISTS, matches=lambda _: True)
    )
    return rules


def classify_probe(outcome: ProbeOutcome, rules: Sequence[ProbeRule]) -> ProbeDecision:
    for rule in rules:
        if rule.matches(outcome):
            return ProbeDecision(rule=rule.name, verdict=rule.verdict)
    return ProbeDecision(rule="no_rule_matched", verdict=ProbeVerdict.INDETERMINATE)
