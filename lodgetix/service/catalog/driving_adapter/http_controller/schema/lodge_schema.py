from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class GrandLodgeResponse(BaseModel):
    id: str
    name: str
    country: Optional[str] = None
    country_code_iso3: Optional[str] = None
    abbreviation: Optional[str] = None

    class Config:
        from_attributes = True


class LodgeCreateRequest(BaseModel):
    grand_lodge_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    number: Optional[str] = None
    district: Optional[str] = None
    meeting_place: Optional[str] = None
    area_type: Optional[str] = None

    class Config:
        json_schema_extra = {
            'example': {
                'grand_lodge_id': '0196a4f1-7a3c-7d2e-9b1a-3f5c2d8e4a10',
                'name': 'Lodge Antiquity',
                'number': '1',
                'district': 'Metropolitan',
                'meeting_place': 'Sydney Masonic Centre',
            }
        }


class LodgeResponse(BaseModel):
    id: str
    grand_lodge_id: str
    name: str
    number: Optional[str] = None
    display_name: Optional[str] = None
    district: Optional[str] = None
    meeting_place: Optional[str] = None
    area_type: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
