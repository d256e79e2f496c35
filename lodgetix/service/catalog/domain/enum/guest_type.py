from enum import StrEnum


class GuestType(StrEnum):
    GUEST = 'guest'
    PARTNER = 'partner'
