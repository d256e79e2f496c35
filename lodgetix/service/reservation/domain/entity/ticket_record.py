from typing import Any, Optional, Union

import attrs

from lodgetix.platform.logging.loguru_io import Logger
from lodgetix.service.reservation.domain.enum.ticket_status import TicketStatus


def _optional_float(value: Any) -> Optional[float]:
    if value is None or value == '':
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _ticket_status(value: Any) -> Union[TicketStatus, str]:
    """Unknown statuses are kept verbatim so consumers still see what the backend sent"""
    if value is None or value == '':
        return TicketStatus.AVAILABLE
    try:
        return TicketStatus(value)
    except ValueError:
        Logger.base.warning(f'⚠️ [TICKET] Unknown ticket status {value!r}, passing it through')
        return str(value)


def _optional_str(value: Any) -> Optional[str]:
    return None if value is None else str(value)


@attrs.define
class TicketRecord:
    """
    Read-only mirror of a backend `tickets` row as delivered by row-change
    notifications. Column names follow the table (no underscores in the
    legacy columns).
    """

    ticketid: str
    eventid: str
    ticketdefinitionid: Optional[str] = None
    attendeeid: Optional[str] = None
    pricepaid: Optional[float] = None
    seatinfo: Optional[str] = None
    status: Union[TicketStatus, str] = TicketStatus.AVAILABLE
    checkedinat: Optional[str] = None
    createdat: Optional[str] = None
    updatedat: Optional[str] = None
    reservation_id: Optional[str] = None
    reservation_expires_at: Optional[str] = None
    original_price: Optional[float] = None
    currency: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> 'TicketRecord':
        return cls(
            ticketid=str(row.get('ticketid', '')),
            eventid=str(row.get('eventid', '')),
            ticketdefinitionid=_optional_str(row.get('ticketdefinitionid')),
            attendeeid=_optional_str(row.get('attendeeid')),
            pricepaid=_optional_float(row.get('pricepaid')),
            seatinfo=_optional_str(row.get('seatinfo')),
            status=_ticket_status(row.get('status')),
            checkedinat=_optional_str(row.get('checkedinat')),
            createdat=_optional_str(row.get('createdat')),
            updatedat=_optional_str(row.get('updatedat')),
            reservation_id=_optional_str(row.get('reservation_id')),
            reservation_expires_at=_optional_str(row.get('reservation_expires_at')),
            original_price=_optional_float(row.get('original_price')),
            currency=_optional_str(row.get('currency')),
        )

    def to_payload(self) -> dict[str, Any]:
        payload = attrs.asdict(self)
        payload['status'] = str(self.status)
        return payload
