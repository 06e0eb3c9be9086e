"""
Authentication schemas.
"""
from typing import Optional
from pydantic import BaseModel

from leadtracker.schemas.common import CamelModel
from leadtracker.schemas.user import UserResponse


class Identity(BaseModel):
    """Resolved caller identity, independent of how it was authenticated."""
    id: int
    role: str
    name: str

    class Config:
        frozen = True


class LoginRequest(BaseModel):
    """Dashboard login request."""
    username: str
    password: str

    class Config:
        json_schema_extra = {
            "example": {
                "username": "admin",
                "password": "admin123"
            }
        }


class LoginResponse(CamelModel):
    """
    Login result. On success the client keeps `user` for display and sends
    `access_token` as a Bearer token on every later request.
    """
    success: bool
    user: Optional[UserResponse] = None
    message: str
    access_token: Optional[str] = None
    token_type: Optional[str] = None
    expires_in: Optional[int] = None  # seconds
