"""Exportación JSON de resultados.

Por qué JSON:
- Interoperabilidad con otras herramientas y pipelines (la CLI puede usarse en batch).
- Mismo shape que devuelve la API.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from core.domain.models import Coordinate, DoesNotExist, Exists, MultipleResolution, SingleResolution


def resolution_payload(result: SingleResolution | MultipleResolution) -> dict[str, Any]:
    return {"pdamatriz": result.payload()}


def existence_payload(result: Any) -> dict[str, Any]:
    """Shape de respuesta de `/verification`."""

    payload: dict[str, Any] = {"message": result.message}
    if isinstance(result, Exists):
        if result.matrix_parcel_id is not None:
            payload["pdamatriz"] = result.matrix_parcel_id
        if result.sub_units is not None:
            payload["phs"] = [unit.model_dump(by_alias=True) for unit in result.sub_units]
    elif not isinstance(result, DoesNotExist):
        payload["reason"] = result.reason
    return payload


def export_result_json(*, coord: Coordinate, payload: dict[str, Any], output_path: Path) -> Path:
    """Exporta el resultado a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    document = {"lat": coord.lat, "lng": coord.lng, **payload}
    output_path.write_text(
        json.dumps(document, ensure_ascii=False, indent=2, sort_keys=True) + "\n",
        encoding="utf-8",
    )
    return output_path
