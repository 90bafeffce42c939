"""
Data models for queue messages.
"""

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ClickMessage(BaseModel):
    """
    One traversal of a redirect code, on its way to the click_events table.

    Built by the redirect route and handed to a click recorder (directly or
    through the queue). The client address has already been reduced to a
    salted hash; the raw address never enters this model.
    """

    link_code: str = Field(..., description="The short code that was followed")
    ts: datetime = Field(default_factory=_utcnow, description="When the click happened")

    # Request metadata
    referer: Optional[str] = Field(None, description="HTTP referer")
    user_agent: Optional[str] = Field(None, description="User agent string")
    ip_hash: Optional[str] = Field(None, description="Salted SHA-256 of the client address")

    # Set by queue backends that need acknowledgement
    message_id: Optional[str] = Field(None, exclude=True)

    model_config = {
        "json_schema_extra": {
            "example": {
                "link_code": "aZ3k9QwE",
                "ts": "2025-10-29T10:30:00+00:00",
                "referer": "https://mail.google.com/",
                "user_agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) Chrome/120.0",
                "ip_hash": "5e884898da28047151d0e56f8dc62927",
            }
        }
    }
