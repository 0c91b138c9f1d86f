"""
Organization Pydantic schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class OrganizationResponse(BaseModel):
    """Profile of the organization behind an API key."""
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    primary_wallet: str
    default_platform_fee: int
    created_at: Optional[datetime] = None
