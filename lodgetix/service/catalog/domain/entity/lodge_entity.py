from datetime import datetime
import re
from typing import Optional

import attrs


LODGE_NUMBER_PATTERN = re.compile(r'^\d+$')


def lodge_display_name(name: str, number: Optional[str]) -> str:
    """`Lodge Antiquity No. 1`; the number suffix only when there is one"""
    return f'{name} No. {number}' if number else name


def is_lodge_number(search_term: Optional[str]) -> bool:
    return bool(search_term and LODGE_NUMBER_PATTERN.match(search_term.strip()))


@attrs.define
class GrandLodgeEntity:
    id: str
    name: str
    country: Optional[str] = None
    country_code_iso3: Optional[str] = None
    abbreviation: Optional[str] = None
    created_at: Optional[datetime] = None


@attrs.define
class LodgeEntity:
    grand_lodge_id: str
    name: str
    number: Optional[str] = None
    display_name: Optional[str] = None
    district: Optional[str] = None
    meeting_place: Optional[str] = None
    area_type: Optional[str] = None
    id: Optional[str] = None
    created_at: Optional[datetime] = None
