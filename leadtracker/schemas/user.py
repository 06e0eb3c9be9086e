"""
User schemas.
"""
from typing import Optional, List
from pydantic import Field

from leadtracker.models.user import Role
from leadtracker.schemas.common import CamelModel


class UserResponse(CamelModel):
    """User details response. The password never leaves the service."""
    id: int
    username: str
    name: str
    role: str
    avatar: str = ""


class UserListResponse(CamelModel):
    users: List[UserResponse]


class UserCreate(CamelModel):
    """Create a dashboard user (Administrator only)."""
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    name: str = Field(min_length=1)
    role: Role = Role.SALES_REPRESENTATIVE
    avatar: str = ""

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "username": "somchai",
                "password": "changeme",
                "name": "Somchai K.",
                "role": "Sales Representative"
            }
        }


class UserUpdate(CamelModel):
    """
    Update a user.
    An empty password is treated as "unchanged" (the profile form always sends the field).
    """
    username: Optional[str] = Field(default=None, min_length=1)
    password: Optional[str] = None
    name: Optional[str] = Field(default=None, min_length=1)
    role: Optional[Role] = None
    avatar: Optional[str] = None

    class Config:
        use_enum_values = True
