"""Esquemas de entrada de la API."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from core.domain.models import Coordinate


class CoordinateRequest(BaseModel):
    lat: float = Field(..., description="Latitud.")
    lng: float = Field(..., description="Longitud.")

    def coordinate(self) -> Coordinate:
        return Coordinate(lat=self.lat, lng=self.lng)


class ResolveRequest(CoordinateRequest):
    email: str = Field(..., min_length=3, max_length=320, description="Destinatario del resultado.")

    @field_validator("email")
    @classmethod
    def _looks_like_email(cls, value: str) -> str:
        value = value.strip()
        if "@" not in value:
            raise ValueError("email inválido")
        return value


class VerificationRequest(CoordinateRequest):
    pass
