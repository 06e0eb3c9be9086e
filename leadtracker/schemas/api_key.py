"""
API key schemas.
"""
from typing import Optional, List
from pydantic import Field

from leadtracker.schemas.common import CamelModel


class ApiKeyCreate(CamelModel):
    """Issue a key for a user."""
    name: str = Field(min_length=1)
    user_id: int

    class Config:
        json_schema_extra = {"example": {"name": "CRM sync", "userId": 1}}


class ApiKeyUpdate(CamelModel):
    is_active: bool


class ApiKeyResponse(CamelModel):
    """API key details. `key` is masked in listings."""
    id: int
    key: str
    name: str
    user_id: int
    user_name: Optional[str] = None
    created_at: int
    last_used: Optional[int] = None
    is_active: bool


class ApiKeyEnvelope(CamelModel):
    api_key: ApiKeyResponse


class ApiKeyListResponse(CamelModel):
    api_keys: List[ApiKeyResponse]
