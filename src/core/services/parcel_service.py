"""Resolución de partidas y verificación de existencia.

Este módulo concentra el flujo que comparten la API y la CLI:

1. Consulta catastral por coordenadas.
2. Rama por tipo de propiedad:
   - propiedad horizontal: segunda consulta con `&ph` para las unidades funcionales;
   - parcela simple: partida matriz. Para *verificar* existencia no alcanza con
     que el catastro la liste (puede estar dada de baja): se consulta el
     comprobante de deuda y se interpreta con `probe_policy`.
3. (Solo resolución) notificación por email al solicitante.

Todas las llamadas de un request comparten un `Deadline`. El servicio no guarda
estado entre requests.
"""

from __future__ import annotations

from typing import Sequence

from core.config import AppSettings
from core.deadline import Deadline
from core.domain.errors import NotificationError, ResolutionError, TransportError, VerificationError
from core.domain.models import (
    CadastralRecord,
    Coordinate,
    DoesNotExist,
    ExistenceResult,
    Exists,
    Indeterminate,
    MultipleResolution,
    ProbeOutcome,
    RawResponse,
    ResolutionResult,
    SingleResolution,
    SubUnit,
)
from core.interfaces.notifier import Notifier
from core.interfaces.transport import Transport
from core.logging import bind_context
from core.services.probe_policy import (
    OPTIMISTIC_DEFAULT_RULE,
    ProbeRule,
    ProbeVerdict,
    classify_probe,
    default_rules,
)
from core.services.upstream import (
    build_catastro_url,
    build_deuda_url,
    parse_cadastral_record,
    parse_sub_units,
)


def _raise_for_status(response: RawResponse) -> None:
    # En el catastro un 4xx es un rechazo del upstream, no "sin datos".
    status = response.status_code
    if status is not None and not 200 <= status < 300:
        raise TransportError(response.url, status_code=status, attempts=1)


class ParcelService:
    """Resolver + verificador sobre un `Transport` intercambiable."""

    def __init__(
        self,
        *,
        transport: Transport,
        settings: AppSettings | None = None,
        notifier: Notifier | None = None,
        rules: Sequence[ProbeRule] | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport
        self._notifier = notifier
        self._rules = list(rules) if rules is not None else default_rules(self._settings)

    def new_deadline(self) -> Deadline:
        return Deadline(self._settings.request_deadline_seconds)

    async def _fetch_record(self, coord: Coordinate, deadline: Deadline) -> CadastralRecord:
        url = build_catastro_url(self._settings, coord)
        response = await self._transport.fetch(url, deadline=deadline)
        _raise_for_status(response)
        return parse_cadastral_record(response.json_payload())

    async def _fetch_sub_units(self, coord: Coordinate, deadline: Deadline) -> tuple[SubUnit, ...]:
        url = build_catastro_url(self._settings, coord, horizontal=True)
        response = await self._transport.fetch(url, deadline=deadline)
        _raise_for_status(response)
        return parse_sub_units(response.json_payload())

    async def resolve_parcel(
        self,
        coord: Coordinate,
        *,
        deadline: Deadline | None = None,
        request_id: str | None = None,
    ) -> ResolutionResult:
        """Devuelve la partida matriz o la lista de unidades funcionales.

        Errores:
        - `ResolutionError(EMPTY_RESPONSE)` si el catastro respondió vacío.
        - `ResolutionError(NO_DATA)` si no hay partida matriz ni unidades.
        - `TransportError` si el upstream no respondió o rechazó la consulta (no-2xx).
        """

        deadline = deadline or self.new_deadline()
        log = bind_context(request_id=request_id, lat=coord.lat, lng=coord.lng)
        log.info("Resolviendo partida")

        record = await self._fetch_record(coord, deadline)

        if record.is_horizontal_property:
            log.info("Propiedad horizontal detectada; consultando unidades funcionales")
            units = await self._fetch_sub_units(coord, deadline)
            if units:
                log.info("Unidades funcionales obtenidas: {}", len(units))
                return MultipleResolution(sub_units=units)
            raise ResolutionError.no_data("propiedad horizontal sin unidades funcionales")

        if record.matrix_parcel_id:
            log.bind(partida=record.matrix_parcel_id).info("Partida matriz obtenida")
            return SingleResolution(matrix_parcel_id=record.matrix_parcel_id)

        raise ResolutionError.no_data("la respuesta no incluye partida matriz")

    async def verify_existence(
        self,
        coord: Coordinate,
        *,
        deadline: Deadline | None = None,
        request_id: str | None = None,
    ) -> ExistenceResult:
        """Confirma si la partida en `coord` sigue activa.

        `TransportError` en la consulta catastral se propaga; las fallas del
        comprobante de deuda que la política no clasifica se reportan como
        `VerificationError`.
        """

        deadline = deadline or self.new_deadline()
        log = bind_context(request_id=request_id, lat=coord.lat, lng=coord.lng)
        log.info("Verificando existencia de partida")

        try:
            record = await self._fetch_record(coord, deadline)
        except ResolutionError as exc:
            raise VerificationError("respuesta catastral vacía o sin formato esperado", cause=exc) from exc

        if record.is_horizontal_property:
            units = await self._fetch_sub_units(coord, deadline)
            if units:
                log.info("La partida existe (propiedad horizontal, {} unidades)", len(units))
                return Exists(sub_units=units)
            log.info("La partida no existe (propiedad horizontal sin unidades)")
            return DoesNotExist()

        if record.matrix_parcel_id:
            return await self._probe_debt(record.matrix_parcel_id, deadline, request_id=request_id)

        log.info("La partida no existe (respuesta sin partida matriz ni unidades)")
        return DoesNotExist()

    async def _probe_debt(
        self,
        matrix_parcel_id: str,
        deadline: Deadline,
        *,
        request_id: str | None = None,
    ) -> ExistenceResult:
        log = bind_context(request_id=request_id, partida=matrix_parcel_id)
        url = build_deuda_url(self._settings, matrix_parcel_id)

        try:
            response = await self._transport.fetch(url, deadline=deadline)
        except TransportError as exc:
            # Un transporte que levanta excepción con el código reservado sigue siendo "no existe".
            if exc.status_code == self._settings.probe_not_found_status:
                log.info("La partida no existe (HTTP {} en comprobante de deuda)", exc.status_code)
                return DoesNotExist()
            raise VerificationError("no se pudo consultar el comprobante de deuda", cause=exc) from exc

        decision = classify_probe(ProbeOutcome.from_response(response), self._rules)
        log = log.bind(rule=decision.rule, status_code=response.status_code)

        if decision.rule == OPTIMISTIC_DEFAULT_RULE and response.status_code and response.status_code >= 400:
            log.warning("Comprobante de deuda con status inesperado; se asume que la partida existe")

        if decision.verdict is ProbeVerdict.DOES_NOT_EXIST:
            log.info("La partida no existe")
            return DoesNotExist()
        if decision.verdict is ProbeVerdict.INDETERMINATE:
            log.warning("No se pudo clasificar el comprobante de deuda")
            return Indeterminate(reason=f"{decision.rule}: status {response.status_code}")

        log.info("La partida existe")
        return Exists(matrix_parcel_id=matrix_parcel_id)

    async def resolve_and_notify(
        self,
        coord: Coordinate,
        recipient: str,
        *,
        deadline: Deadline | None = None,
        request_id: str | None = None,
    ) -> ResolutionResult:
        """Resuelve la partida y la envía por email a `recipient`.

        Si el envío falla se lanza `NotificationError` con el resultado adjunto:
        el contrato es "resuelto Y notificado".
        """

        result = await self.resolve_parcel(coord, deadline=deadline, request_id=request_id)

        if self._notifier is None:
            raise NotificationError(recipient, RuntimeError("notifier not configured"), result=result)

        try:
            await self._notifier.notify(recipient, result)
        except NotificationError as exc:
            if exc.result is None:
                raise NotificationError(recipient, exc.cause, result=result) from exc
            raise

        bind_context(request_id=request_id).info("Email enviado a {}", recipient)
        return result
