from typing import Optional

import attrs


@attrs.define
class TicketDefinitionEntity:
    id: str
    event_id: str
    name: str
    price: Optional[float] = None
    description: Optional[str] = None
    is_active: bool = True
    available_quantity: int = 0
    sold_quantity: int = 0
