"""URLs y mapeo de payloads de los servicios upstream.

- Catastro (EPOK): `?lng=..&lat=..` devuelve `propiedad_horizontal`, `pdamatriz`;
  con el flag `&ph` agrega `phs` (unidades funcionales).
- Deuda ABL (AGIP): comprobante en PDF parametrizado por la partida matriz.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any
from urllib.parse import quote

from loguru import logger
from pydantic import ValidationError

from core.config import AppSettings
from core.domain.errors import ResolutionError
from core.domain.models import CadastralRecord, Coordinate, SubUnit

HORIZONTAL_PROPERTY_FLAG = "Si"


def format_coordinate(value: float) -> str:
    """Decimal más corto que representa `value`, sin notación exponencial (`1e-05` -> `0.00001`)."""

    return format(Decimal(repr(value)), "f")


def build_catastro_url(settings: AppSettings, coord: Coordinate, *, horizontal: bool = False) -> str:
    url = f"{settings.catastro_url}?lng={format_coordinate(coord.lng)}&lat={format_coordinate(coord.lat)}"
    if horizontal:
        url += "&ph"
    return url


def build_deuda_url(settings: AppSettings, matrix_parcel_id: str) -> str:
    return settings.deuda_url_template.format(partida=quote(matrix_parcel_id, safe=""))


def parse_cadastral_record(payload: Any) -> CadastralRecord:
    """Normaliza la respuesta primaria del catastro.

    Lanza `ResolutionError.empty_response` si el payload está vacío o no es un objeto.
    """

    if not payload or not isinstance(payload, dict):
        raise ResolutionError.empty_response("respuesta vacía o sin formato esperado")

    matrix = payload.get("pdamatriz")
    matrix_id = str(matrix).strip() if matrix not in (None, "") else None

    return CadastralRecord(
        is_horizontal_property=payload.get("propiedad_horizontal") == HORIZONTAL_PROPERTY_FLAG,
        matrix_parcel_id=matrix_id or None,
        sub_units=parse_sub_units(payload) if "phs" in payload else None,
    )


def parse_sub_units(payload: Any) -> tuple[SubUnit, ...]:
    """Extrae `phs` preservando el orden de origen.

    Entradas que no son objetos o no traen `pdahorizontal` se descartan.
    """

    if not isinstance(payload, dict):
        return ()
    raw_units = payload.get("phs")
    if not isinstance(raw_units, list):
        return ()

    units: list[SubUnit] = []
    for entry in raw_units:
        if not isinstance(entry, dict):
            continue
        try:
            units.append(SubUnit.model_validate(entry))
        except ValidationError as exc:
            logger.warning("Unidad funcional descartada: {}", exc.errors()[0].get("msg"))
    return tuple(units)
