"""
Contacts - Models

Contact details collected before the questionnaire starts, and the payload
sent to the CRM.
"""

import re
from datetime import datetime, timezone
from typing import List

from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


class ContactInfo(BaseModel):
    """
    Client contact details.

    All fields are trimmed before length checks.
    """
    name: str = Field(description="Full name, 2-100 characters")
    email: str = Field(description="Email address, max 255 characters")
    phone: str = Field(description="Phone number, 10-20 characters")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2:
            raise ValueError("Name must be at least 2 characters")
        if len(v) > 100:
            raise ValueError("Name must be less than 100 characters")
        return v

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        v = v.strip()
        if not EMAIL_PATTERN.match(v):
            raise ValueError("Please enter a valid email address")
        if len(v) > 255:
            raise ValueError("Email must be less than 255 characters")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 10:
            raise ValueError("Please enter a valid phone number")
        if len(v) > 20:
            raise ValueError("Phone number is too long")
        return v


class ContactSyncPayload(BaseModel):
    """Body posted to the CRM webhook."""
    name: str
    email: str
    phone: str
    source: str = "tax-planning-questionnaire"
    tags: List[str] = Field(default_factory=list)
    submitted_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )

    @classmethod
    def from_contact(cls, contact: ContactInfo, tags: List[str] = None) -> "ContactSyncPayload":
        return cls(
            name=contact.name,
            email=contact.email,
            phone=contact.phone,
            tags=list(tags or []),
        )


class ContactAcceptedResponse(BaseModel):
    """API response after a contact is accepted."""
    success: bool = True
    contact: ContactInfo
    sync_scheduled: bool
