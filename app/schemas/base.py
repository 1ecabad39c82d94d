"""
Base Pydantic schemas with common fields.

These are templates that other schemas inherit from.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class TimestampedRead(BaseModel):
    """
    Base schema for reading stored records.

    Includes all the auto-generated fields like id and timestamps.
    """

    id: UUID
    created_at: datetime
    updated_at: datetime

    # This tells Pydantic to work with SQLAlchemy models
    model_config = ConfigDict(from_attributes=True)


class AllowListUpdate(BaseModel):
    """
    Base schema for partial updates.

    Only the declared fields may be sent; anything else is rejected.
    """

    model_config = ConfigDict(extra="forbid", use_enum_values=True)
