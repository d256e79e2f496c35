"""Catalog Application Interfaces"""

from lodgetix.service.catalog.app.interface.i_attendee_command_repo import IAttendeeCommandRepo
from lodgetix.service.catalog.app.interface.i_attendee_query_repo import IAttendeeQueryRepo
from lodgetix.service.catalog.app.interface.i_customer_command_repo import ICustomerCommandRepo
from lodgetix.service.catalog.app.interface.i_customer_query_repo import ICustomerQueryRepo
from lodgetix.service.catalog.app.interface.i_event_query_repo import IEventQueryRepo
from lodgetix.service.catalog.app.interface.i_lodge_command_repo import ILodgeCommandRepo
from lodgetix.service.catalog.app.interface.i_lodge_query_repo import ILodgeQueryRepo
from lodgetix.service.catalog.app.interface.i_registration_command_repo import (
    IRegistrationCommandRepo,
)
from lodgetix.service.catalog.app.interface.i_registration_query_repo import (
    IRegistrationQueryRepo,
)

__all__ = [
    'IAttendeeCommandRepo',
    'IAttendeeQueryRepo',
    'ICustomerCommandRepo',
    'ICustomerQueryRepo',
    'IEventQueryRepo',
    'ILodgeCommandRepo',
    'ILodgeQueryRepo',
    'IRegistrationCommandRepo',
    'IRegistrationQueryRepo',
]
