"""Endpoints: resolución + email y verificación de existencia."""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Request

from adapters.json_exporter import existence_payload, resolution_payload
from api.schemas import ResolveRequest, VerificationRequest
from core.logging import bind_context
from core.services.parcel_service import ParcelService

router = APIRouter()


def get_parcel_service(request: Request) -> ParcelService:
    return request.app.state.parcel_service


@router.post("/fetch-abl-data")
async def fetch_abl_data(body: ResolveRequest, service: ParcelService = Depends(get_parcel_service)):
    """Resuelve la partida de las coordenadas y la envía por email."""

    request_id = uuid.uuid4().hex[:12]
    bind_context(request_id=request_id).info("Received data: lat={} lng={} email={}", body.lat, body.lng, body.email)

    result = await service.resolve_and_notify(body.coordinate(), body.email, request_id=request_id)
    return {"message": "Email enviado con éxito", **resolution_payload(result)}


@router.post("/verification")
async def verification(body: VerificationRequest, service: ParcelService = Depends(get_parcel_service)):
    """Verifica si la partida de las coordenadas sigue activa."""

    request_id = uuid.uuid4().hex[:12]
    bind_context(request_id=request_id).info("Received verification request: lat={} lng={}", body.lat, body.lng)

    result = await service.verify_existence(body.coordinate(), request_id=request_id)
    return existence_payload(result)


@router.get("/health")
async def health():
    return {"status": "operational"}
