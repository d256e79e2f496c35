from collections.abc import AsyncGenerator
from typing import Optional

import anyio
from fastapi import APIRouter, Depends, Response, status
import orjson
from sse_starlette.sse import EventSourceResponse

from lodgetix.platform.config.core_setting import settings
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.reservation.app.channel_registry import Subscription
from lodgetix.service.reservation.app.dto import (
    NotificationTopic,
    Reservation,
    ReservationErrorKind,
    ReservationResult,
    TicketAvailability,
)
from lodgetix.service.reservation.app.reservation_orchestrator import ReservationOrchestrator
from lodgetix.service.reservation.domain.entity.ticket_record import TicketRecord
from lodgetix.service.reservation.driving_adapter.http_controller.client_dependency import (
    ACCESS_TOKEN_COOKIE,
    get_client_id,
    get_orchestrator_registry,
    get_reservation_orchestrator,
)
from lodgetix.service.reservation.driving_adapter.http_controller.schema.reservation_schema import (
    CompleteReservationRequest,
    HighDemandResponse,
    RealtimeConnectionResponse,
    RegistrationTypeRequest,
    RegistrationTypeResponse,
    ReservationResponse,
    ReservationResultResponse,
    ReserveTicketsRequest,
    StorageOutcomeResponse,
    StoredReservationResponse,
    TicketAvailabilityResponse,
    TicketChangeResponse,
)
from lodgetix.service.reservation.driving_adapter.orchestrator_registry import (
    OrchestratorRegistry,
)


router = APIRouter()

ERROR_STATUS_CODES = {
    ReservationErrorKind.VALIDATION: status.HTTP_400_BAD_REQUEST,
    ReservationErrorKind.SESSION: status.HTTP_401_UNAUTHORIZED,
    ReservationErrorKind.BACKEND: status.HTTP_409_CONFLICT,
    ReservationErrorKind.TIMED_OUT: status.HTTP_504_GATEWAY_TIMEOUT,
    ReservationErrorKind.UNEXPECTED: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _to_reservation_response(reservation: Reservation) -> ReservationResponse:
    return ReservationResponse(
        ticket_id=reservation.ticket_id,
        reservation_id=reservation.reservation_id,
        expires_at=reservation.expires_at,
        event_id=reservation.event_id,
        ticket_definition_id=reservation.ticket_definition_id,
    )


def _to_result_response(result: ReservationResult, response: Response) -> ReservationResultResponse:
    if not result.success and result.error_kind is not None:
        response.status_code = ERROR_STATUS_CODES[result.error_kind]
    return ReservationResultResponse(
        success=result.success,
        data=[_to_reservation_response(r) for r in result.data],
        error=result.error,
        error_kind=str(result.error_kind) if result.error_kind else None,
    )


def _connection_response(orchestrator: ReservationOrchestrator) -> RealtimeConnectionResponse:
    return RealtimeConnectionResponse(
        client_id=orchestrator.client_id,
        event_id=orchestrator.event_id,
        channels=orchestrator.active_channel_names(),
    )


# ============================ Realtime Connections ============================


@router.post('/events/{event_id}/realtime', status_code=status.HTTP_200_OK)
@Logger.io
async def initialize_realtime_connections(
    event_id: str,
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> RealtimeConnectionResponse:
    await orchestrator.init(event_id)
    return _connection_response(orchestrator)


@router.delete('/realtime', status_code=status.HTTP_200_OK)
@Logger.io
async def cleanup_realtime_connections(
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> RealtimeConnectionResponse:
    await orchestrator.cleanup_realtime_connections()
    return _connection_response(orchestrator)


@router.delete('/session', status_code=status.HTTP_204_NO_CONTENT)
@Logger.io
async def dispose_client_session(
    response: Response,
    client_id: str = Depends(get_client_id),
    registry: OrchestratorRegistry = Depends(get_orchestrator_registry),
) -> None:
    await registry.dispose(client_id)
    response.delete_cookie(key=ACCESS_TOKEN_COOKIE)


# ============================ Reservation ============================


@router.post('', status_code=status.HTTP_201_CREATED)
@Logger.io
async def reserve_tickets(
    request: ReserveTicketsRequest,
    response: Response,
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> ReservationResultResponse:
    result = await orchestrator.reserve_tickets(
        event_id=request.event_id,
        ticket_definition_id=request.ticket_definition_id,
        quantity=request.quantity,
    )
    return _to_result_response(result, response)


@router.post('/{reservation_id}/complete', status_code=status.HTTP_200_OK)
@Logger.io
async def complete_reservation(
    reservation_id: str,
    request: CompleteReservationRequest,
    response: Response,
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> ReservationResultResponse:
    result = await orchestrator.complete_reservation(
        reservation_id=reservation_id, attendee_id=request.attendee_id
    )
    return _to_result_response(result, response)


# ============================ Availability ============================


@router.get('/availability', status_code=status.HTTP_200_OK)
@Logger.io
async def get_ticket_availability(
    event_id: str,
    ticket_definition_id: str,
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> TicketAvailabilityResponse:
    availability = await orchestrator.get_ticket_availability(
        event_id=event_id, ticket_definition_id=ticket_definition_id
    )
    return TicketAvailabilityResponse(**availability.to_payload())


@router.get('/availability/high-demand', status_code=status.HTTP_200_OK)
@Logger.io
async def is_ticket_high_demand(
    event_id: str,
    ticket_definition_id: str,
    threshold_percent: Optional[int] = None,
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> HighDemandResponse:
    high_demand = await orchestrator.is_ticket_high_demand(
        event_id=event_id,
        ticket_definition_id=ticket_definition_id,
        threshold_percent=threshold_percent,
    )
    return HighDemandResponse(
        event_id=event_id, ticket_definition_id=ticket_definition_id, high_demand=high_demand
    )


# ============================ Client Storage ============================


@router.get('/stored', status_code=status.HTTP_200_OK)
@Logger.io
async def get_stored_reservation(
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> StoredReservationResponse:
    reservation = await orchestrator.get_stored_reservation()
    if reservation is None:
        return StoredReservationResponse()
    return StoredReservationResponse(reservation=_to_reservation_response(reservation))


@router.delete('/stored', status_code=status.HTTP_200_OK)
@Logger.io
async def clear_stored_reservation(
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> StorageOutcomeResponse:
    outcome = await orchestrator.clear_stored_reservation()
    return StorageOutcomeResponse(outcome=outcome)


@router.put('/registration-type', status_code=status.HTTP_200_OK)
@Logger.io
async def store_registration_type(
    request: RegistrationTypeRequest,
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> StorageOutcomeResponse:
    outcome = await orchestrator.store_registration_type(request.registration_type)
    return StorageOutcomeResponse(outcome=outcome)


@router.get('/registration-type', status_code=status.HTTP_200_OK)
@Logger.io
async def get_stored_registration_type(
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> RegistrationTypeResponse:
    registration_type = await orchestrator.get_stored_registration_type()
    return RegistrationTypeResponse(registration_type=registration_type)


# ============================ SSE Endpoints ============================


def _sse_error(message: str) -> dict:
    return {'event': 'error', 'data': orjson.dumps({'error': message}).decode()}


@router.get('/availability/sse', status_code=status.HTTP_200_OK)
@Logger.io(truncate_content=True)
async def stream_ticket_availability(
    event_id: str,
    ticket_definition_id: str,
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> EventSourceResponse:
    """
    SSE stream of availability counts for one ticket definition.

    The first message is the current snapshot; each later message follows a
    change to a matching ticket row.
    """
    send_stream, receive_stream = anyio.create_memory_object_stream[dict](
        max_buffer_size=settings.PRESENCE_STREAM_BUFFER_SIZE
    )

    def on_counts(counts: TicketAvailability) -> None:
        try:
            send_stream.send_nowait(counts.to_payload())
        except (anyio.WouldBlock, anyio.BrokenResourceError):
            Logger.base.debug(f'📡 [SSE] Dropped availability update for {ticket_definition_id}')

    async def event_generator() -> AsyncGenerator[dict, None]:
        subscription: Subscription = await orchestrator.subscribe_to_availability_changes(
            event_id=event_id, ticket_definition_id=ticket_definition_id, callback=on_counts
        )
        try:
            if not subscription.active:
                yield _sse_error('Availability subscription failed')
                return
            async with receive_stream:
                async for counts in receive_stream:
                    response = TicketAvailabilityResponse(**counts)
                    yield {'event': 'availability_update', 'data': response.model_dump_json()}
        finally:
            await subscription.unsubscribe()
            await send_stream.aclose()

    return EventSourceResponse(event_generator())


@router.get('/tickets/{reservation_id}/sse', status_code=status.HTTP_200_OK)
@Logger.io(truncate_content=True)
async def stream_ticket_changes(
    reservation_id: str,
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> EventSourceResponse:
    """SSE stream of updated ticket rows belonging to a reservation"""
    send_stream, receive_stream = anyio.create_memory_object_stream[TicketRecord](
        max_buffer_size=settings.PRESENCE_STREAM_BUFFER_SIZE
    )

    def on_ticket(ticket: TicketRecord) -> None:
        try:
            send_stream.send_nowait(ticket)
        except (anyio.WouldBlock, anyio.BrokenResourceError):
            Logger.base.debug(f'📡 [SSE] Dropped ticket update for {reservation_id}')

    async def event_generator() -> AsyncGenerator[dict, None]:
        subscription = await orchestrator.subscribe_to_ticket_changes(
            reservation_id=reservation_id, callback=on_ticket
        )
        try:
            if not subscription.active:
                yield _sse_error('Ticket subscription failed')
                return
            async with receive_stream:
                async for ticket in receive_stream:
                    response = TicketChangeResponse(**ticket.to_payload())
                    yield {'event': 'ticket_update', 'data': response.model_dump_json()}
        finally:
            await subscription.unsubscribe()
            await send_stream.aclose()

    return EventSourceResponse(event_generator())


@router.get('/presence/sse', status_code=status.HTTP_200_OK)
@Logger.io(truncate_content=True)
async def stream_presence_updates(
    topic: NotificationTopic = NotificationTopic.PRESENCE_UPDATE,
    orchestrator: ReservationOrchestrator = Depends(get_reservation_orchestrator),
) -> EventSourceResponse:
    """
    SSE stream of the client's notifications: presence summaries
    (`ticket-presence-update`, default) or system status
    (`ticket-system-status`). Requires open realtime connections.
    """

    async def event_generator() -> AsyncGenerator[dict, None]:
        stream = await orchestrator.broadcaster.subscribe(topic=topic)
        try:
            async for event_data in stream:
                yield {'event': str(topic), 'data': orjson.dumps(event_data).decode()}
        finally:
            await orchestrator.broadcaster.unsubscribe(topic=topic, stream=stream)

    return EventSourceResponse(event_generator())
