"""
Request / Response schemas — API contract definitions.
These are Pydantic models used ONLY at the controller (HTTP) boundary.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ObservationCreate(BaseModel):
    # Both optional here so a missing field becomes a 400, not a 422.
    text: Optional[str] = None
    author: Optional[str] = None


class IntervalUpdate(BaseModel):
    entrada: Optional[datetime] = None
    saida: Optional[datetime] = None


class IntervalCreate(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    user_id: str = Field(..., min_length=1, max_length=32)
    username: str = Field(..., min_length=1, max_length=255)
    batalhao_id: str = Field(..., min_length=1, max_length=32)
    entrada: datetime
    saida: Optional[datetime] = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
    request_id: Optional[str] = None
