"""
Shared schema bases.
"""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire. Also builds from ORM rows."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
