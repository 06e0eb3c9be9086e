"""
Lead model - core entity for sales lead tracking.
Timestamps are epoch milliseconds; budget is free text as entered by sales.
"""
from enum import Enum
from typing import Optional

from sqlmodel import SQLModel, Field
from sqlalchemy import BigInteger, Column


class LeadStatus(str, Enum):
    NEW = "New"
    QUALIFIED = "Qualified"
    IN_PROGRESS = "In Progress"
    CONVERTED = "Converted"
    LOST = "Lost"


class LeadSource(str, Enum):
    WEBSITE = "Website"
    YOUTUBE = "Youtube"
    SEARCH = "Search"
    REFERRAL = "Referral"
    SOCIAL_MEDIA = "Social Media"
    EVENT = "Event"
    OTHER = "Other"


# created_by_id for leads with no known owner (imported or pre-migration rows)
UNATTRIBUTED_USER_ID = 0


class Lead(SQLModel, table=True):
    """
    Lead entity - a potential customer and the project it is attached to.
    Ownership (created_by_id / created_by) is stamped by the server only.
    """
    id: Optional[int] = Field(default=None, primary_key=True)

    # Contact
    name: str = Field(index=True)
    company: str = Field(index=True)
    email: str = Field(index=True)
    phone: str

    # Pipeline
    source: str = Field(index=True)
    status: str = Field(default=LeadStatus.NEW.value, index=True)

    # Product
    product: Optional[str] = None
    product_register: Optional[str] = None

    # End user
    end_user_contact: Optional[str] = None
    end_user_organization: Optional[str] = None

    # Project
    project_name: Optional[str] = None
    budget: Optional[str] = None  # display string, e.g. "฿1,000,000"
    partner_contact: Optional[str] = None

    # Audit
    created_at: int = Field(sa_column=Column(BigInteger, nullable=False, index=True))
    updated_at: Optional[int] = Field(default=None, sa_column=Column(BigInteger, nullable=True))
    created_by: Optional[str] = None
    created_by_id: int = Field(default=UNATTRIBUTED_USER_ID, index=True)
