"""Reservation Service Interfaces"""

from lodgetix.service.reservation.app.interface.i_client_storage import IClientStorage
from lodgetix.service.reservation.app.interface.i_reservation_rpc_gateway import (
    IReservationRpcGateway,
)
from lodgetix.service.reservation.app.interface.i_session_gateway import ISessionGateway

__all__ = [
    'IClientStorage',
    'IReservationRpcGateway',
    'ISessionGateway',
]
