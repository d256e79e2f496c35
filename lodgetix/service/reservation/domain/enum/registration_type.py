from enum import StrEnum


class RegistrationType(StrEnum):
    INDIVIDUAL = 'individual'
    LODGE = 'lodge'
    DELEGATION = 'delegation'
