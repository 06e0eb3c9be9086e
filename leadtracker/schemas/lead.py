"""
Lead schemas.
"""
from typing import Optional, List
from pydantic import EmailStr, Field, field_validator

from leadtracker.models.lead import LeadSource, LeadStatus
from leadtracker.schemas.common import CamelModel


class LeadCreate(CamelModel):
    """Create a new lead. Ownership fields are stamped by the server."""
    name: str = Field(min_length=1)
    company: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(min_length=1)
    source: LeadSource
    status: LeadStatus = LeadStatus.NEW
    product: Optional[str] = None
    product_register: Optional[str] = None
    end_user_contact: Optional[str] = None
    end_user_organization: Optional[str] = None
    project_name: Optional[str] = None
    budget: Optional[str] = None
    partner_contact: Optional[str] = None

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "name": "John Doe",
                "company": "Softnix Technology",
                "email": "john@example.com",
                "phone": "0812345678",
                "source": "Website",
                "status": "New",
                "product": "Data Analytics",
                "productRegister": "Softnix Data Platform",
                "endUserContact": "Jane Smith",
                "endUserOrganization": "PTT Global Chemical",
                "projectName": "Data Analytics Platform",
                "budget": "5,000,000",
                "partnerContact": "Somchai"
            }
        }


class LeadUpdate(CamelModel):
    """Partial update of an existing lead."""
    name: Optional[str] = Field(default=None, min_length=1)
    company: Optional[str] = Field(default=None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, min_length=1)
    source: Optional[LeadSource] = None
    status: Optional[LeadStatus] = None
    product: Optional[str] = None
    product_register: Optional[str] = None
    end_user_contact: Optional[str] = None
    end_user_organization: Optional[str] = None
    project_name: Optional[str] = None
    budget: Optional[str] = None
    partner_contact: Optional[str] = None

    @field_validator("name", "company", "email", "phone", "source", "status")
    @classmethod
    def required_fields_not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    class Config:
        use_enum_values = True


class LeadResponse(CamelModel):
    """Lead response."""
    id: int
    name: str
    company: str
    email: str
    phone: str
    source: str
    status: str
    product: Optional[str] = None
    product_register: Optional[str] = None
    end_user_contact: Optional[str] = None
    end_user_organization: Optional[str] = None
    project_name: Optional[str] = None
    budget: Optional[str] = None
    partner_contact: Optional[str] = None
    created_at: int
    updated_at: Optional[int] = None
    created_by: Optional[str] = None
    created_by_id: int


class LeadEnvelope(CamelModel):
    lead: LeadResponse


class LeadListResponse(CamelModel):
    leads: List[LeadResponse]


class LeadSearch(CamelModel):
    """
    Search criteria.
    `keyword` matches any searchable field and, when present, the field
    filters are ignored. Field filters are combined with AND.
    """
    keyword: Optional[str] = None
    name: Optional[str] = None
    project_name: Optional[str] = None
    end_user_organization: Optional[str] = None
    company: Optional[str] = None
    product: Optional[str] = None


class LeadSearchResponse(CamelModel):
    data: List[LeadResponse]
    total: int
