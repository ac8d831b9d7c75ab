"""
Define the Message record shared by the store and the API.
"""

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Current wall-clock time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class Message(BaseModel):
    """A posted message. Frozen: once created it never changes."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    text: str
    source_ip: str
    created_at: datetime = Field(default_factory=utc_now)
