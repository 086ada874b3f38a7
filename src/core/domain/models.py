"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Normaliza las distintas formas en que responden los servicios upstream
  (catastro, deuda ABL) en valores inmutables.

Nota:
- Estos modelos describen *qué* es la información, no *cómo* se obtiene.
- Todos son `frozen`: cada request construye y descarta su propio grafo.
"""

from __future__ import annotations

import json
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

PDF_CONTENT_TYPE = "application/pdf"


def is_pdf_content_type(content_type: str | None) -> bool:
    return bool(content_type) and content_type.lower().startswith(PDF_CONTENT_TYPE)


class Coordinate(BaseModel):
    """Par (latitud, longitud) tal como lo envía el caller.

    No se valida rango: los valores se pasan sin tocar al catastro.
    """

    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., description="Latitud.")
    lng: float = Field(..., description="Longitud.")


class SubUnit(BaseModel):
    """Unidad funcional de una propiedad horizontal."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    sub_parcel_id: str = Field(
        ...,
        alias="pdahorizontal",
        description="Partida horizontal de la unidad.",
    )
    floor: str = Field(
        default="",
        alias="piso",
        description="Piso.",
    )
    unit: str = Field(
        default="",
        alias="dpto",
        description="Departamento/unidad.",
    )

    @field_validator("sub_parcel_id", mode="before")
    @classmethod
    def _id_as_text(cls, value: Any) -> Any:
        # El upstream mezcla números y strings; el identificador es texto opaco.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("floor", "unit", mode="before")
    @classmethod
    def _label_as_text(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value)


class CadastralRecord(BaseModel):
    """Resultado de la consulta catastral primaria."""

    model_config = ConfigDict(frozen=True)

    is_horizontal_property: bool = Field(default=False)
    matrix_parcel_id: str | None = Field(
        default=None,
        description="Partida matriz (parcela no subdividida).",
    )
    sub_units: tuple[SubUnit, ...] | None = Field(
        default=None,
        description="Unidades funcionales (solo propiedad horizontal).",
    )


class SingleResolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["single"] = "single"
    matrix_parcel_id: str

    def payload(self) -> str:
        return self.matrix_parcel_id


class MultipleResolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["multiple"] = "multiple"
    sub_units: tuple[SubUnit, ...]

    def payload(self) -> list[dict[str, str]]:
        return [unit.model_dump(by_alias=True) for unit in self.sub_units]


ResolutionResult = Annotated[
    Union[SingleResolution, MultipleResolution],
    Field(discriminator="kind"),
]


class Exists(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["exists"] = "exists"
    matrix_parcel_id: str | None = None
    sub_units: tuple[SubUnit, ...] | None = None

    @property
    def message(self) -> str:
        return "La partida existe"


class DoesNotExist(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["does_not_exist"] = "does_not_exist"

    @property
    def message(self) -> str:
        return "La partida no existe"


class Indeterminate(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["indeterminate"] = "indeterminate"
    reason: str

    @property
    def message(self) -> str:
        return "No se pudo determinar si la partida existe"


ExistenceResult = Annotated[
    Union[Exists, DoesNotExist, Indeterminate],
    Field(discriminator="kind"),
]


class RawResponse(BaseModel):
    """Respuesta cruda de un `Transport`, independiente de la implementación.

    `text` es el cuerpo textual (JSON, HTML o texto renderizado); `content` son
    los bytes originales cuando el transporte los tiene (p.ej. un PDF).
    """

    model_config = ConfigDict(frozen=True)

    url: str
    status_code: int | None = None
    content_type: str | None = None
    text: str = ""
    content: bytes = b""

    def json_payload(self) -> Any | None:
        """Parsea `text` como JSON; `None` si está vacío o no es JSON."""

        body = self.text.strip()
        if not body:
            return None
        try:
            return json.loads(body)
        except json.JSONDecodeError:
            return None


class ProbeOutcome(BaseModel):
    """Respuesta normalizada del comprobante de deuda.

    Las reglas de clasificación solo miran estos tres campos, sin importar qué
    transporte produjo la respuesta.
    """

    model_config = ConfigDict(frozen=True)

    status_code: int | None = None
    content_type: str | None = None
    body_text: str = ""

    @classmethod
    def from_response(cls, response: RawResponse) -> "ProbeOutcome":
        return cls(
            status_code=response.status_code,
            content_type=response.content_type,
            body_text=response.text,
        )
