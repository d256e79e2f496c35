from enum import StrEnum


class SystemStatusType(StrEnum):
    """Kinds of `ticket-system-status` broadcast on an event's system channel"""

    AVAILABILITY_UPDATE = 'availability_update'
    HIGH_DEMAND = 'high_demand'
    SYSTEM_MAINTENANCE = 'system_maintenance'
