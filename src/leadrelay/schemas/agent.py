"""Pydantic schemas for agent roster seeding"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..domain.parsing.validators import is_valid_email, normalize_email


class AgentSeed(BaseModel):
    """One roster entry in a seed file.

    Accepts both snake_case and camelCase keys (booking_url / bookingUrl).
    """
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=200)
    email: str
    phone: Optional[str] = None
    booking_url: Optional[str] = Field(None, alias="bookingUrl")
    is_active: bool = Field(True, alias="isActive")

    @field_validator('name')
    @classmethod
    def validate_name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Agent name cannot be empty or whitespace")
        return v.strip()

    @field_validator('email')
    @classmethod
    def validate_email(cls, v: str) -> str:
        if not is_valid_email(v):
            raise ValueError(f"Invalid agent email: {v}")
        return normalize_email(v)


class AgentSeedFile(BaseModel):
    """Seed file: either a bare list or {"agents": [...]}"""
    agents: List[AgentSeed]
