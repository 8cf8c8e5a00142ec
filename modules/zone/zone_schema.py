from pydantic import BaseModel
from typing import Dict, List, Optional

from schema.enums import Zone


class PincodeDetails(BaseModel):
    pincode: str
    city: str
    state: str
    region: Optional[str] = None

    class Config:
        from_attributes = True
        frozen = True


class ZoneRequestModel(BaseModel):
    pickup_pincode: str
    delivery_pincode: str


class ZoneResponseModel(BaseModel):
    pickup_pincode: str
    delivery_pincode: str
    zone: Zone


class ZoneMappingRequestModel(BaseModel):
    pickup_pincode: str
    delivery_pincodes: List[str]


class ZoneMappingResponseModel(BaseModel):
    pickup_pincode: str
    zones: Dict[str, Optional[Zone]]
    unknown_pincodes: List[str] = []
