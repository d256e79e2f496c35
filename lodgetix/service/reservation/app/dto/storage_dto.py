from enum import StrEnum


class StorageOutcome(StrEnum):
    """Result of a client storage write/clear; reads map anything but OK to a miss"""

    OK = 'ok'
    STORAGE_UNAVAILABLE = 'storage_unavailable'
    CORRUPT = 'corrupt'
