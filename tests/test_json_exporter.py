from __future__ import annotations

import json

from adapters.json_exporter import existence_payload, export_result_json, resolution_payload
from core.domain.models import Coordinate, DoesNotExist, Exists, Indeterminate, SingleResolution, SubUnit


def test_existence_payload_shapes():
    unit = SubUnit(sub_parcel_id="1", floor="PB", unit="A")

    assert existence_payload(Exists(matrix_parcel_id="123")) == {"message": "La partida existe", "pdamatriz": "123"}
    assert existence_payload(Exists(sub_units=(unit,))) == {
        "message": "La partida existe",
        "phs": [{"pdahorizontal": "1", "piso": "PB", "dpto": "A"}],
    }
    assert existence_payload(DoesNotExist()) == {"message": "La partida no existe"}
    assert existence_payload(Indeterminate(reason="x"))["reason"] == "x"


def test_export_result_json(tmp_path):
    coord = Coordinate(lat=-34.6, lng=-58.4)
    path = export_result_json(
        coord=coord,
        payload=resolution_payload(SingleResolution(matrix_parcel_id="123")),
        output_path=tmp_path / "out" / "resultado.json",
    )

    assert json.loads(path.read_text(encoding="utf-8")) == {"lat": -34.6, "lng": -58.4, "pdamatriz": "123"}
