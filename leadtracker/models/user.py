"""
User model with role-based access.
Roles form a total order; see core.permissions for the levels.
"""
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field


class Role(str, Enum):
    ADMINISTRATOR = "Administrator"
    SALES_MANAGER = "Sales Manager"
    SALES_REPRESENTATIVE = "Sales Representative"


class User(SQLModel, table=True):
    """
    Dashboard user.
    `password` holds a bcrypt hash; rows created before hashing was introduced
    may still hold plaintext until their next successful login.
    """
    id: Optional[int] = Field(default=None, primary_key=True)

    # Auth
    username: str = Field(unique=True, index=True)
    password: str

    # Profile
    name: str
    role: str = Field(default=Role.SALES_REPRESENTATIVE.value, index=True)
    avatar: str = Field(default="")
