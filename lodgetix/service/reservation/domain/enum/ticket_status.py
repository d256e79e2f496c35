from enum import StrEnum


class TicketStatus(StrEnum):
    """Lifecycle of a row in the backend `tickets` table"""

    AVAILABLE = 'available'
    RESERVED = 'reserved'
    SOLD = 'sold'
    USED = 'used'
    CANCELLED = 'cancelled'
