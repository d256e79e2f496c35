from datetime import date
from typing import Optional

import attrs


@attrs.define(frozen=True)
class EventDayEntity:
    id: str
    date: date
    name: str
    day_number: Optional[int] = None
    featured_events_summary: Optional[str] = None
