"""
API key model for the external integration surface.
"""
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import BigInteger, Column


class ApiKey(SQLModel, table=True):
    """
    Opaque token owned by a user.
    Requests made with the key act with the owner's identity.
    """
    __tablename__ = "api_key"

    id: Optional[int] = Field(default=None, primary_key=True)
    key: str = Field(unique=True, index=True)
    name: str
    user_id: int = Field(foreign_key="user.id", ondelete="CASCADE", index=True)

    # Status
    is_active: bool = Field(default=True)

    # Timestamps (epoch ms)
    created_at: int = Field(sa_column=Column(BigInteger, nullable=False))
    last_used: Optional[int] = Field(default=None, sa_column=Column(BigInteger, nullable=True))
