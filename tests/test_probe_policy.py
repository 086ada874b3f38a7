from __future__ import annotations

import pytest

from core.domain.models import ProbeOutcome
from core.services.probe_policy import (
    OPTIMISTIC_DEFAULT_RULE,
    ProbeVerdict,
    classify_probe,
    default_rules,
)


def _outcome(status=200, content_type="text/html", body=""):
    return ProbeOutcome(status_code=status, content_type=content_type, body_text=body)


def test_pdf_wins_over_embedded_markers(settings):
    outcome = _outcome(content_type="application/pdf", body='"statusCode":402')

    decision = classify_probe(outcome, default_rules(settings))

    assert decision.verdict is ProbeVerdict.EXISTS
    assert decision.rule == "pdf_document"


@pytest.mark.parametrize(
    "body",
    [
        '{"statusCode":402}',
        '{"statusCode": "402", "error": "Payment Required"}',
        "<pre>{&quot;statusCode&quot;:402}</pre>",
    ],
)
def test_embedded_status_marker(settings, body):
    decision = classify_probe(_outcome(body=body), default_rules(settings))

    assert decision.verdict is ProbeVerdict.DOES_NOT_EXIST
    assert decision.rule == "embedded_status_marker"


def test_status_marker_does_not_match_longer_codes(settings):
    decision = classify_probe(_outcome(body='{"statusCode":4021}'), default_rules(settings))

    assert decision.verdict is ProbeVerdict.EXISTS


def test_known_error_text_is_case_insensitive(settings):
    decision = classify_probe(_outcome(body="ERROR: PARTIDA INEXISTENTE"), default_rules(settings))

    assert decision.verdict is ProbeVerdict.DOES_NOT_EXIST
    assert decision.rule == "embedded_error_text"


def test_http_status_not_found(settings):
    decision = classify_probe(_outcome(status=402, body="Payment Required"), default_rules(settings))

    assert decision.verdict is ProbeVerdict.DOES_NOT_EXIST
    assert decision.rule == "http_status_not_found"


def test_optimistic_default_for_unclassified_response(settings):
    decision = classify_probe(_outcome(status=500, body="Internal error"), default_rules(settings))

    assert decision.verdict is ProbeVerdict.EXISTS
    assert decision.rule == OPTIMISTIC_DEFAULT_RULE


def test_strict_mode_marks_unclassified_errors_indeterminate(strict_settings):
    rules = default_rules(strict_settings)

    assert classify_probe(_outcome(status=404), rules).verdict is ProbeVerdict.INDETERMINATE
    # Un 2xx sin señal negativa sigue siendo "existe".
    assert classify_probe(_outcome(status=200, body="ok"), rules).verdict is ProbeVerdict.EXISTS


def test_custom_not_found_status(settings):
    rules = default_rules(settings.model_copy(update={"probe_not_found_status": 410}))

    assert classify_probe(_outcome(status=410), rules).verdict is ProbeVerdict.DOES_NOT_EXIST
    assert classify_probe(_outcome(body='"statusCode":410'), rules).verdict is ProbeVerdict.DOES_NOT_EXIST


def test_no_rules_is_indeterminate():
    decision = classify_probe(_outcome(), [])

    assert decision.verdict is ProbeVerdict.INDETERMINATE
