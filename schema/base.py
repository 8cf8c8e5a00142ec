from pydantic import BaseModel
from datetime import datetime
from uuid import UUID
from typing import Optional, Any


# Generic response model for all responses
class GenericResponseModel(BaseModel):
    status_code: int
    message: Optional[str] = None
    status: bool = False
    data: Any = {}


# Base model for all models that are read back from the database
class DBBaseModel(BaseModel):
    id: int
    uuid: UUID
    created_at: datetime
    updated_at: Optional[datetime]
    is_deleted: bool = False

    class Config:
        from_attributes = True


class PaginationParams(BaseModel):
    batch_size: int = 20
    page_number: int = 1
