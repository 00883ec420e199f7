from pydantic import BaseModel, Field, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional
from datetime import datetime


class KeywordCreate(BaseModel):
    """Schema for the client request to follow a keyword"""
    text: str = Field(..., max_length=100, description="Keyword text, stored lower-cased and trimmed")

class KeywordUpdate(BaseModel):
    """Schema for partial keyword updates"""
    text: Optional[str] = Field(None, max_length=100)
    is_active: Optional[bool] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

class KeywordResponse(BaseModel):
    id: int
    user_id: int
    text: str
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True
    )
