from enum import StrEnum
from typing import Any, Optional

import attrs

from lodgetix.service.reservation.domain.enum.system_status_type import SystemStatusType


class NotificationTopic(StrEnum):
    """Topics an orchestrator publishes on its event broadcaster"""

    PRESENCE_UPDATE = 'ticket-presence-update'
    SYSTEM_STATUS = 'ticket-system-status'


@attrs.define
class PresenceEntry:
    client_id: str
    event_id: str
    viewing_since: int  # epoch ms
    is_reserving: bool = False
    ticket_definition_id: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            'clientId': self.client_id,
            'eventId': self.event_id,
            'viewingSince': self.viewing_since,
            'isReserving': self.is_reserving,
        }
        if self.ticket_definition_id is not None:
            payload['ticketDefinitionId'] = self.ticket_definition_id
        return payload

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> 'PresenceEntry':
        return cls(
            client_id=str(payload.get('clientId', '')),
            event_id=str(payload.get('eventId', '')),
            viewing_since=int(payload.get('viewingSince') or 0),
            is_reserving=bool(payload.get('isReserving', False)),
            ticket_definition_id=payload.get('ticketDefinitionId'),
        )


@attrs.define(frozen=True)
class PresenceSummary:
    total_viewers: int
    total_reserving: int
    timestamp: int  # epoch ms

    @classmethod
    def from_presence_state(
        cls, state: dict[str, list[dict[str, Any]]], *, timestamp: int
    ) -> 'PresenceSummary':
        entries = [entry for presences in state.values() for entry in presences]
        return cls(
            total_viewers=len(entries),
            total_reserving=sum(1 for entry in entries if entry.get('isReserving')),
            timestamp=timestamp,
        )

    def to_payload(self) -> dict[str, int]:
        return {
            'totalViewers': self.total_viewers,
            'totalReserving': self.total_reserving,
            'timestamp': self.timestamp,
        }


@attrs.define(frozen=True)
class SystemStatusMessage:
    type: SystemStatusType
    event_id: str
    message: str
    timestamp: int
    ticket_definition_id: Optional[str] = None
    available_count: Optional[int] = None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> 'SystemStatusMessage':
        """
        Raises:
            ValueError: unknown status type or malformed counters
            KeyError: missing type
        """
        available = payload.get('availableCount')
        return cls(
            type=SystemStatusType(payload['type']),
            event_id=str(payload.get('eventId', '')),
            message=str(payload.get('message', '')),
            timestamp=int(payload.get('timestamp') or 0),
            ticket_definition_id=payload.get('ticketDefinitionId'),
            available_count=int(available) if available is not None else None,
        )

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            'type': str(self.type),
            'eventId': self.event_id,
            'message': self.message,
            'timestamp': self.timestamp,
        }
        if self.ticket_definition_id is not None:
            payload['ticketDefinitionId'] = self.ticket_definition_id
        if self.available_count is not None:
            payload['availableCount'] = self.available_count
        return payload
