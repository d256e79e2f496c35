"""
Reservation Orchestrator

Single point of contact between a client and the remote reservation
subsystem. Owns the client identity, the lifecycle of the realtime channels
(presence, system status, row-change subscriptions) and the local reservation
cache. Reserve/complete/expire semantics belong to the backend procedures;
this class only orchestrates them.

Nothing here raises to the caller: write operations return a
`ReservationResult`, reads return safe defaults.
"""

from functools import partial
import time
from typing import Any, Awaitable, Callable, List, Optional
import uuid

import anyio
from opentelemetry import trace

from lodgetix.platform.config.core_setting import settings
from lodgetix.platform.event.i_in_memory_broadcaster import IInMemoryEventBroadcaster
from lodgetix.platform.exception.exceptions import BackendRpcError, DomainError, SessionError
from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.platform.metrics.reservation_metrics import metrics
from lodgetix.platform.realtime.base_channel import invoke_handler
from lodgetix.platform.realtime.i_realtime_client import (
    IRealtimeClient,
    PresenceEvent,
    RowChange,
    RowChangeEvent,
)
from lodgetix.service.reservation.app.channel_registry import (
    ChannelEntry,
    ChannelKind,
    ChannelRegistry,
    Subscription,
)
from lodgetix.service.reservation.app.dto import (
    NotificationTopic,
    PresenceEntry,
    PresenceSummary,
    Reservation,
    ReservationErrorKind,
    ReservationResult,
    ReservedTicketRow,
    StorageOutcome,
    SystemStatusMessage,
    TicketAvailability,
)
from lodgetix.service.reservation.app.interface import IReservationRpcGateway
from lodgetix.service.reservation.app.reservation_cache import Clock, ReservationCache, epoch_ms
from lodgetix.service.reservation.app.session_bootstrap import SessionBootstrap
from lodgetix.service.reservation.domain.entity.ticket_record import TicketRecord


SYSTEM_STATUS_EVENT = 'ticket-system-status'
TICKETS_SCHEMA = 'public'
TICKETS_TABLE = 'tickets'

AvailabilityCallback = Callable[[TicketAvailability], Awaitable[None] | None]
TicketCallback = Callable[[TicketRecord], Awaitable[None] | None]


def presence_channel_name(event_id: str) -> str:
    return f'presence-tickets-{event_id}'


def system_channel_name(event_id: str) -> str:
    return f'system-tickets-{event_id}'


def ticket_channel_name(reservation_id: str) -> str:
    return f'ticket-updates-{reservation_id}'


def availability_channel_name(event_id: str, ticket_definition_id: str) -> str:
    return f'availability-{event_id}-{ticket_definition_id}'


class ReservationOrchestrator:
    """
    One instance per client session.

    Lifecycle: `init(event_id)` opens the event's presence/system channels,
    `dispose()` tears down every channel and closes the notification
    broadcaster. Consumers observe presence summaries and system status on
    `broadcaster` (topics in `NotificationTopic`).
    """

    def __init__(
        self,
        *,
        rpc_gateway: IReservationRpcGateway,
        session_bootstrap: SessionBootstrap,
        realtime_client: IRealtimeClient,
        reservation_cache: ReservationCache,
        broadcaster: IInMemoryEventBroadcaster,
        client_id: Optional[str] = None,
        clock: Clock = epoch_ms,
        hold_minutes: Optional[int] = None,
        timeout_seconds: Optional[float] = None,
    ) -> None:
        self.rpc_gateway = rpc_gateway
        self.session_bootstrap = session_bootstrap
        self.realtime_client = realtime_client
        self.reservation_cache = reservation_cache
        self.broadcaster = broadcaster
        self.client_id = client_id or str(uuid.uuid4())
        self.clock = clock
        self.hold_minutes = hold_minutes or settings.RESERVATION_HOLD_MINUTES
        self.timeout_seconds = timeout_seconds or settings.RESERVATION_OPERATION_TIMEOUT_SECONDS
        self.tracer = trace.get_tracer(__name__)

        self._channels = ChannelRegistry()
        self._event_id: Optional[str] = None
        self._presence_entry: Optional[PresenceEntry] = None
        self._disposed = False

    def __repr__(self) -> str:
        return f'<ReservationOrchestrator client={self.client_id} event={self._event_id}>'

    # ========== Lifecycle ==========

    @property
    def event_id(self) -> Optional[str]:
        return self._event_id

    @property
    def disposed(self) -> bool:
        return self._disposed

    def active_channel_names(self) -> List[str]:
        return self._channels.names()

    def has_open_streams(self) -> bool:
        """True while a consumer is attached to a notification topic or a row-change channel"""
        if any(self.broadcaster.subscriber_count(topic=topic) for topic in NotificationTopic):
            return True
        return self._channels.listener_count() > 0

    async def init(self, event_id: str) -> None:
        await self.initialize_realtime_connections(event_id)

    async def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        await self.cleanup_realtime_connections()
        await self.broadcaster.close()
        Logger.base.info(f'🧹 [ORCHESTRATOR] Disposed client {self.client_id}')

    # ========== Realtime Connections ==========

    async def initialize_realtime_connections(self, event_id: str) -> None:
        """
        Open the presence and system channels of an event.

        Idempotent per event. Switching to another event closes the previous
        event's presence/system channels first; row-change subscriptions stay.
        """
        if not event_id or not event_id.strip():
            Logger.base.warning('⚠️ [REALTIME] Event ID is required for realtime connections')
            return

        if self._event_id is not None and self._event_id != event_id:
            await self._close_event_channels(self._event_id)
        self._event_id = event_id

        if presence_channel_name(event_id) not in self._channels:
            await self._setup_presence_channel(event_id)
        if system_channel_name(event_id) not in self._channels:
            await self._setup_system_channel(event_id)

    async def cleanup_realtime_connections(self) -> None:
        entries = self._channels.drain()
        for entry in entries:
            await self._teardown(entry)
        self._event_id = None
        self._presence_entry = None
        if entries:
            Logger.base.info(
                f'🧹 [ORCHESTRATOR] Closed {len(entries)} channels for client {self.client_id}'
            )

    async def _close_event_channels(self, event_id: str) -> None:
        for name in (presence_channel_name(event_id), system_channel_name(event_id)):
            entry = self._channels.pop(name)
            if entry is not None:
                await self._teardown(entry)
        self._presence_entry = None

    async def _join(self, entry: ChannelEntry) -> bool:
        """Subscribe a channel under the operation timeout; False when it did not join"""
        try:
            with anyio.fail_after(self.timeout_seconds):
                await entry.channel.subscribe()
        except TimeoutError:
            Logger.base.warning(f'⏰ [REALTIME] Subscribe to {entry.name} timed out')
            await self._discard(entry)
            entry.mark_ready(joined=False)
            return False
        except Exception as e:
            Logger.base.warning(f'⚠️ [REALTIME] Subscribe to {entry.name} failed: {e}')
            await self._discard(entry)
            entry.mark_ready(joined=False)
            return False

        metrics.channel_opened(kind=entry.kind)
        entry.mark_ready(joined=True)
        Logger.base.debug(f'📡 [REALTIME] Subscribed to {entry.name}')
        return True

    async def _discard(self, entry: ChannelEntry) -> None:
        try:
            with anyio.move_on_after(self.timeout_seconds):
                await self.realtime_client.remove_channel(entry.channel)
        except Exception as e:
            Logger.base.warning(f'⚠️ [REALTIME] Removing {entry.name} failed: {e}')

    async def _teardown(self, entry: ChannelEntry) -> None:
        await self._discard(entry)
        if entry.joined:
            entry.joined = False
            metrics.channel_closed(kind=entry.kind)

    async def _setup_presence_channel(self, event_id: str) -> None:
        channel = self.realtime_client.channel(
            presence_channel_name(event_id), presence_key=self.client_id
        )
        for presence_event in (PresenceEvent.SYNC, PresenceEvent.JOIN, PresenceEvent.LEAVE):
            channel.on_presence(presence_event, partial(self._notify_presence_updates, channel))

        entry = ChannelEntry(channel=channel, kind=ChannelKind.PRESENCE)
        if not await self._join(entry):
            return

        self._channels.register(entry)
        self._presence_entry = PresenceEntry(
            client_id=self.client_id, event_id=event_id, viewing_since=self.clock()
        )
        await self._track_presence()

    async def _setup_system_channel(self, event_id: str) -> None:
        channel = self.realtime_client.channel(system_channel_name(event_id))
        channel.on_broadcast(SYSTEM_STATUS_EVENT, self._on_system_status)

        entry = ChannelEntry(channel=channel, kind=ChannelKind.SYSTEM)
        if await self._join(entry):
            self._channels.register(entry)

    # ========== Presence ==========

    async def _track_presence(self) -> None:
        """Publish this client's presence entry; best effort"""
        if self._presence_entry is None or self._event_id is None:
            return
        entry = self._channels.get(presence_channel_name(self._event_id))
        if entry is None:
            return
        try:
            with anyio.fail_after(self.timeout_seconds):
                await entry.channel.track(self._presence_entry.to_payload())
        except TimeoutError:
            Logger.base.warning(f'⏰ [PRESENCE] Track on {entry.name} timed out')
        except Exception as e:
            Logger.base.warning(f'⚠️ [PRESENCE] Track on {entry.name} failed: {e}')

    async def _update_presence(
        self, *, is_reserving: bool, event_id: str, ticket_definition_id: str
    ) -> bool:
        """Returns True when the presence entry was changed"""
        if self._presence_entry is None or self._presence_entry.event_id != event_id:
            return False
        self._presence_entry.is_reserving = is_reserving
        self._presence_entry.ticket_definition_id = ticket_definition_id
        self._presence_entry.viewing_since = self.clock()
        await self._track_presence()
        return True

    async def _notify_presence_updates(self, channel: Any) -> None:
        try:
            state = await channel.presence_state()
        except Exception as e:
            Logger.base.warning(f'⚠️ [PRESENCE] Reading state of {channel.name} failed: {e}')
            return
        summary = PresenceSummary.from_presence_state(state, timestamp=self.clock())
        await self.broadcaster.broadcast(
            topic=NotificationTopic.PRESENCE_UPDATE, event_data=summary.to_payload()
        )

    async def _on_system_status(self, payload: dict[str, Any]) -> None:
        try:
            status = SystemStatusMessage.from_payload(payload)
        except (KeyError, ValueError, TypeError) as e:
            Logger.base.warning(f'⚠️ [SYSTEM] Ignoring malformed status message: {e}')
            return
        Logger.base.info(
            f'📣 [SYSTEM] {status.type} for event {status.event_id}: {status.message}'
        )
        await self.broadcaster.broadcast(
            topic=NotificationTopic.SYSTEM_STATUS, event_data=status.to_payload()
        )

    # ========== Reservation ==========

    def _to_reservations(
        self, rows: List[ReservedTicketRow], *, event_id: str, ticket_definition_id: str
    ) -> List[Reservation]:
        reservations = [
            Reservation(
                ticket_id=row.ticket_id,
                reservation_id=row.reservation_id,
                expires_at=row.expires_at,
                event_id=event_id,
                ticket_definition_id=ticket_definition_id,
            )
            for row in rows
        ]
        if len({(r.reservation_id, r.expires_at) for r in reservations}) > 1:
            raise BackendRpcError('Backend returned tickets from more than one reservation')
        return reservations

    def _mark_span_error(self, result: ReservationResult) -> None:
        span = trace.get_current_span()
        span.set_status(trace.Status(trace.StatusCode.ERROR, result.error or ''))
        span.set_attribute('error', True)
        span.set_attribute('error.type', str(result.error_kind))

    async def reserve_tickets(
        self, *, event_id: str, ticket_definition_id: str, quantity: int
    ) -> ReservationResult:
        """
        Hold `quantity` tickets of a ticket definition.

        Flow:
        1. Validate input (no network call on failure)
        2. Mark presence as reserving
        3. Ensure a session (anonymous sign in when missing)
        4. Call `reserve_tickets`
        5. Cache the first reservation
        On any failure after step 2 presence is reverted.
        """
        started = time.perf_counter()
        with self.tracer.start_as_current_span(
            'use_case.reserve_tickets',
            attributes={
                'client.id': self.client_id,
                'event.id': event_id or '',
                'ticket_definition.id': ticket_definition_id or '',
                'ticket.quantity': quantity if isinstance(quantity, int) else 0,
            },
        ):
            presence_marked = False
            try:
                # ========== Step 1: Validate ==========
                if not ticket_definition_id or not ticket_definition_id.strip():
                    raise DomainError('Ticket definition ID is required')
                if not event_id or not event_id.strip():
                    Logger.base.info(
                        f'🎫 [RESERVE] No event ID provided, using ticket definition '
                        f'{ticket_definition_id} as event ID'
                    )
                    event_id = ticket_definition_id
                if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                    raise DomainError('Quantity must be greater than 0')

                Logger.base.info(
                    f'🎫 [RESERVE] Reserving {quantity} tickets for event {event_id}, '
                    f'ticket definition {ticket_definition_id}'
                )

                # ========== Step 2: Presence ==========
                presence_marked = await self._update_presence(
                    is_reserving=True, event_id=event_id, ticket_definition_id=ticket_definition_id
                )

                # ========== Step 3: Session ==========
                await self.session_bootstrap.ensure_session()

                # ========== Step 4: Backend RPC ==========
                with anyio.fail_after(self.timeout_seconds):
                    rows = await self.rpc_gateway.reserve_tickets(
                        event_id=event_id,
                        ticket_definition_id=ticket_definition_id,
                        quantity=quantity,
                        reservation_minutes=self.hold_minutes,
                    )
                reservations = self._to_reservations(
                    rows, event_id=event_id, ticket_definition_id=ticket_definition_id
                )

                # ========== Step 5: Cache ==========
                if reservations:
                    await self.reservation_cache.store_reservation_data(reservations[0])
                    Logger.base.info(
                        f'✅ [RESERVE] Held {len(reservations)} tickets under reservation '
                        f'{reservations[0].reservation_id} until {reservations[0].expires_at}'
                    )
                result = ReservationResult.success_result(reservations)

            except TimeoutError:
                Logger.base.warning('⏰ [RESERVE] Reservation request timed out')
                result = ReservationResult.failure_result(
                    'Reservation request timed out', ReservationErrorKind.TIMED_OUT
                )
            except BackendRpcError as e:
                Logger.base.warning(f'⚠️ [RESERVE] Backend error: {e.message}')
                result = ReservationResult.failure_result(e.message, ReservationErrorKind.BACKEND)
            except SessionError as e:
                Logger.base.warning(f'⚠️ [RESERVE] Session error: {e.message}')
                result = ReservationResult.failure_result(e.message, ReservationErrorKind.SESSION)
            except DomainError as e:
                Logger.base.warning(f'⚠️ [RESERVE] Validation error: {e.message}')
                result = ReservationResult.failure_result(
                    e.message, ReservationErrorKind.VALIDATION
                )
            except Exception as e:
                Logger.base.exception(f'❌ [RESERVE] Unexpected error: {e}')
                result = ReservationResult.failure_result(
                    str(e) or 'Unknown error occurred', ReservationErrorKind.UNEXPECTED
                )

            if not result.success:
                self._mark_span_error(result)
                if presence_marked:
                    await self._update_presence(
                        is_reserving=False,
                        event_id=event_id,
                        ticket_definition_id=ticket_definition_id,
                    )

            metrics.record_reservation(
                result='success' if result.success else 'failure',
                error_kind=str(result.error_kind or ''),
                duration=time.perf_counter() - started,
                tickets=len(result.data),
            )
            return result

    async def complete_reservation(
        self, *, reservation_id: str, attendee_id: str
    ) -> ReservationResult:
        """
        Convert a held reservation into assigned tickets.

        The backend only returns ticket ids, so the returned reservations carry
        the reservation id and empty expiry/event/ticket definition fields.
        """
        with self.tracer.start_as_current_span(
            'use_case.complete_reservation',
            attributes={
                'client.id': self.client_id,
                'reservation.id': reservation_id or '',
                'attendee.id': attendee_id or '',
            },
        ):
            try:
                if not reservation_id or not reservation_id.strip():
                    raise DomainError('Reservation ID is required')
                if not attendee_id or not attendee_id.strip():
                    raise DomainError('Attendee ID is required')

                with anyio.fail_after(self.timeout_seconds):
                    ticket_ids = await self.rpc_gateway.complete_reservation(
                        reservation_id=reservation_id, attendee_id=attendee_id
                    )

                cached = await self.reservation_cache.get_stored_reservation()
                if cached is not None and cached.reservation_id == reservation_id:
                    await self.reservation_cache.clear_stored_reservation()

                Logger.base.info(
                    f'✅ [COMPLETE] Reservation {reservation_id} assigned '
                    f'{len(ticket_ids)} tickets to attendee {attendee_id}'
                )
                result = ReservationResult.success_result(
                    [
                        Reservation(
                            ticket_id=ticket_id,
                            reservation_id=reservation_id,
                            expires_at='',
                            event_id='',
                            ticket_definition_id='',
                        )
                        for ticket_id in ticket_ids
                    ]
                )
            except TimeoutError:
                Logger.base.warning(f'⏰ [COMPLETE] Completion of {reservation_id} timed out')
                result = ReservationResult.failure_result(
                    'Completion request timed out', ReservationErrorKind.TIMED_OUT
                )
            except BackendRpcError as e:
                Logger.base.warning(f'⚠️ [COMPLETE] Backend error: {e.message}')
                result = ReservationResult.failure_result(e.message, ReservationErrorKind.BACKEND)
            except DomainError as e:
                result = ReservationResult.failure_result(
                    e.message, ReservationErrorKind.VALIDATION
                )
            except Exception as e:
                Logger.base.exception(f'❌ [COMPLETE] Unexpected error: {e}')
                result = ReservationResult.failure_result(
                    str(e) or 'Unknown error occurred', ReservationErrorKind.UNEXPECTED
                )

            if not result.success:
                self._mark_span_error(result)
            metrics.record_completion(
                result='success' if result.success else 'failure',
                error_kind=str(result.error_kind or ''),
            )
            return result

    # ========== Availability ==========

    async def get_ticket_availability(
        self, *, event_id: str, ticket_definition_id: str
    ) -> TicketAvailability:
        """Current counts; zeros on any error or timeout"""
        try:
            with anyio.fail_after(self.timeout_seconds):
                availability = await self.rpc_gateway.get_ticket_availability(
                    event_id=event_id, ticket_definition_id=ticket_definition_id
                )
            metrics.record_availability_query(result='ok')
            return availability
        except TimeoutError:
            Logger.base.warning(f'⏰ [AVAILABILITY] Query for {ticket_definition_id} timed out')
            metrics.record_availability_query(result='timed_out')
        except Exception as e:
            Logger.base.error(f'❌ [AVAILABILITY] Error getting ticket availability: {e}')
            metrics.record_availability_query(result='error')
        return TicketAvailability.zero()

    async def is_ticket_high_demand(
        self,
        *,
        event_id: str,
        ticket_definition_id: str,
        threshold_percent: Optional[int] = None,
    ) -> bool:
        """False on any error or timeout"""
        try:
            with anyio.fail_after(self.timeout_seconds):
                return await self.rpc_gateway.is_ticket_high_demand(
                    event_id=event_id,
                    ticket_definition_id=ticket_definition_id,
                    threshold_percent=threshold_percent or settings.HIGH_DEMAND_THRESHOLD_PERCENT,
                )
        except TimeoutError:
            Logger.base.warning(
                f'⏰ [AVAILABILITY] High demand check for {ticket_definition_id} timed out'
            )
        except Exception as e:
            Logger.base.error(f'❌ [AVAILABILITY] Error checking high demand: {e}')
        return False

    # ========== Row Change Subscriptions ==========

    async def _acquire(
        self,
        *,
        name: str,
        kind: ChannelKind,
        listener: Callable[..., Any],
        bind: Callable[[Any], None],
    ) -> Optional[int]:
        """
        Join (or share) a reference-counted channel and add a listener.

        Returns the listener token, or None when the channel did not join.
        """
        entry = self._channels.get(name)
        if entry is None:
            channel = self.realtime_client.channel(name)
            bind(channel)
            entry = ChannelEntry(channel=channel, kind=kind)
            token = entry.add_listener(listener)
            self._channels.register(entry)
            if not await self._join(entry):
                self._channels.pop(name)
                return None
            return token

        token = entry.add_listener(listener)
        if not entry.ready.is_set():
            with anyio.move_on_after(self.timeout_seconds):
                await entry.ready.wait()
        if not entry.joined:
            entry.remove_listener(token)
            return None
        return token

    async def _release(self, name: str, token: int) -> None:
        entry = self._channels.get(name)
        if entry is None or token not in entry.listeners:
            return
        if entry.remove_listener(token) == 0:
            self._channels.pop(name)
            await self._teardown(entry)
            Logger.base.debug(f'📡 [REALTIME] Last listener left {name}, channel closed')

    async def _fan_out(self, name: str, value: Any) -> None:
        entry = self._channels.get(name)
        if entry is None:
            return
        for listener in list(entry.listeners.values()):
            await invoke_handler(listener, value)

    async def subscribe_to_availability_changes(
        self, *, event_id: str, ticket_definition_id: str, callback: AvailabilityCallback
    ) -> Subscription:
        """
        Call `callback` with fresh counts whenever a matching ticket row changes,
        plus once right after the subscription is live.
        """
        name = availability_channel_name(event_id, ticket_definition_id)

        async def on_change(_change: RowChange) -> None:
            counts = await self.get_ticket_availability(
                event_id=event_id, ticket_definition_id=ticket_definition_id
            )
            await self._fan_out(name, counts)

        def bind(channel: Any) -> None:
            channel.on_row_change(
                event=RowChangeEvent.ALL,
                schema=TICKETS_SCHEMA,
                table=TICKETS_TABLE,
                filter=f'eventid=eq.{event_id} AND ticketdefinitionid=eq.{ticket_definition_id}',
                handler=on_change,
            )

        token = await self._acquire(
            name=name, kind=ChannelKind.AVAILABILITY, listener=callback, bind=bind
        )
        if token is None:
            return Subscription.inactive(name)

        counts = await self.get_ticket_availability(
            event_id=event_id, ticket_definition_id=ticket_definition_id
        )
        await invoke_handler(callback, counts)
        return Subscription(name, partial(self._release, name, token))

    async def subscribe_to_ticket_changes(
        self, *, reservation_id: str, callback: TicketCallback
    ) -> Subscription:
        """Call `callback` with the updated row whenever a ticket of the reservation changes"""
        name = ticket_channel_name(reservation_id)

        async def on_change(change: RowChange) -> None:
            await self._fan_out(name, TicketRecord.from_row(change.new))

        def bind(channel: Any) -> None:
            channel.on_row_change(
                event=RowChangeEvent.UPDATE,
                schema=TICKETS_SCHEMA,
                table=TICKETS_TABLE,
                filter=f'reservation_id=eq.{reservation_id}',
                handler=on_change,
            )

        token = await self._acquire(
            name=name, kind=ChannelKind.TICKET, listener=callback, bind=bind
        )
        if token is None:
            return Subscription.inactive(name)
        return Subscription(name, partial(self._release, name, token))

    # ========== Cache Passthrough ==========

    async def get_stored_reservation(self) -> Optional[Reservation]:
        return await self.reservation_cache.get_stored_reservation()

    async def clear_stored_reservation(self) -> StorageOutcome:
        return await self.reservation_cache.clear_stored_reservation()

    async def store_registration_type(self, registration_type: str) -> StorageOutcome:
        return await self.reservation_cache.store_registration_type(registration_type)

    async def get_stored_registration_type(self) -> Optional[str]:
        return await self.reservation_cache.get_stored_registration_type()
