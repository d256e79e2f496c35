"""
Database Models

Import all models here to ensure they are registered with SQLAlchemy
"""

from lodgetix.service.catalog.driven_adapter.model.customer_model import CustomerModel
from lodgetix.service.catalog.driven_adapter.model.display_scope_model import DisplayScopeModel
from lodgetix.service.catalog.driven_adapter.model.event_capacity_model import (
    EventCapacityModel,
)
from lodgetix.service.catalog.driven_adapter.model.event_day_model import EventDayModel
from lodgetix.service.catalog.driven_adapter.model.event_model import EventModel
from lodgetix.service.catalog.driven_adapter.model.grand_lodge_model import GrandLodgeModel
from lodgetix.service.catalog.driven_adapter.model.guest_model import GuestModel
from lodgetix.service.catalog.driven_adapter.model.lodge_model import LodgeModel
from lodgetix.service.catalog.driven_adapter.model.mason_model import MasonModel
from lodgetix.service.catalog.driven_adapter.model.registration_model import RegistrationModel
from lodgetix.service.catalog.driven_adapter.model.ticket_definition_model import (
    TicketDefinitionModel,
)
from lodgetix.service.catalog.driven_adapter.model.ticket_model import TicketModel

__all__ = [
    'CustomerModel',
    'DisplayScopeModel',
    'EventCapacityModel',
    'EventDayModel',
    'EventModel',
    'GrandLodgeModel',
    'GuestModel',
    'LodgeModel',
    'MasonModel',
    'RegistrationModel',
    'TicketDefinitionModel',
    'TicketModel',
]
