"""
Contacts

Contact capture ahead of the questionnaire and the single outbound sync of
each new contact to the firm's CRM.

Version: contacts_v1
"""

from .models import (
    ContactInfo,
    ContactSyncPayload,
    ContactAcceptedResponse,
)
from .client import (
    ContactSyncClient,
    ContactSyncError,
    ContactSyncAuthError,
    ContactSyncRateLimitError,
    ContactSyncValidationError,
    sync_contact_in_background,
)

__all__ = [
    "ContactInfo",
    "ContactSyncPayload",
    "ContactAcceptedResponse",
    "ContactSyncClient",
    "ContactSyncError",
    "ContactSyncAuthError",
    "ContactSyncRateLimitError",
    "ContactSyncValidationError",
    "sync_contact_in_background",
]

__version__ = "contacts_v1"
