"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from lodgetix.service.catalog.app.command import (
    create_customer_use_case,
    create_lodge_use_case,
    create_pending_registration_use_case,
    save_attendee_use_case,
    update_customer_use_case,
)
from lodgetix.service.catalog.app.query import (
    get_attendee_use_case,
    get_customer_use_case,
    get_event_use_case,
    get_registration_use_case,
    list_admin_events_use_case,
    list_events_use_case,
    list_lodges_use_case,
    load_registration_use_case,
)
from lodgetix.service.reservation.driving_adapter.http_controller import (
    client_dependency,
    session_controller,
)


WIRE_MODULES: list[ModuleType] = [
    create_customer_use_case,
    update_customer_use_case,
    create_pending_registration_use_case,
    create_lodge_use_case,
    save_attendee_use_case,
    get_attendee_use_case,
    get_customer_use_case,
    get_event_use_case,
    get_registration_use_case,
    list_admin_events_use_case,
    list_events_use_case,
    list_lodges_use_case,
    load_registration_use_case,
    client_dependency,
    session_controller,
]
