from typing import List, Optional

from pydantic import BaseModel, Field

from lodgetix.service.reservation.domain.enum.registration_type import RegistrationType


class ReserveTicketsRequest(BaseModel):
    event_id: str = ''
    ticket_definition_id: str
    quantity: int

    class Config:
        json_schema_extra = {
            'example': {
                'event_id': 'd6f1c7a2-4b7e-4c1e-9d55-7a2b9d3e8f10',
                'ticket_definition_id': '0f3e2c59-8a4d-4b57-9b0c-1e5f2a7d6c44',
                'quantity': 2,
            }
        }


class CompleteReservationRequest(BaseModel):
    attendee_id: str = Field(..., min_length=1)


class ReservationResponse(BaseModel):
    ticket_id: str
    reservation_id: str
    expires_at: str
    event_id: str
    ticket_definition_id: str


class ReservationResultResponse(BaseModel):
    success: bool
    data: List[ReservationResponse] = []
    error: Optional[str] = None
    error_kind: Optional[str] = None

    class Config:
        json_schema_extra = {
            'example': {
                'success': True,
                'data': [
                    {
                        'ticket_id': 'T-1',
                        'reservation_id': 'R1',
                        'expires_at': '2025-01-01T00:15:00Z',
                        'event_id': 'E1',
                        'ticket_definition_id': 'T1',
                    }
                ],
                'error': None,
                'error_kind': None,
            }
        }


class TicketAvailabilityResponse(BaseModel):
    available: int
    reserved: int
    sold: int


class HighDemandResponse(BaseModel):
    event_id: str
    ticket_definition_id: str
    high_demand: bool


class RealtimeConnectionResponse(BaseModel):
    client_id: str
    event_id: Optional[str] = None
    channels: List[str]


class StoredReservationResponse(BaseModel):
    reservation: Optional[ReservationResponse] = None


class StorageOutcomeResponse(BaseModel):
    outcome: str


class RegistrationTypeRequest(BaseModel):
    registration_type: RegistrationType


class RegistrationTypeResponse(BaseModel):
    registration_type: Optional[str] = None


class TicketChangeResponse(BaseModel):
    ticketid: str
    eventid: str
    ticketdefinitionid: Optional[str] = None
    attendeeid: Optional[str] = None
    status: str
    reservation_id: Optional[str] = None
    reservation_expires_at: Optional[str] = None
