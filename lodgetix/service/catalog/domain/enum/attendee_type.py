from enum import StrEnum


class AttendeeType(StrEnum):
    MASON = 'mason'
    GUEST = 'guest'
    LADY_PARTNER = 'lady_partner'
    GUEST_PARTNER = 'guest_partner'
