"""
CRM Contact Sync Client
=======================
Posts new questionnaire contacts to the firm's CRM webhook.

Environment Variables:
- CONTACT_SYNC_URL: webhook URL receiving the contact JSON
- CONTACT_SYNC_API_KEY: optional bearer token
- CONTACT_SYNC_TIMEOUT: request timeout in seconds

Usage:
    from atg_intake.contacts.client import ContactSyncClient

    client = ContactSyncClient()
    client.sync_contact(contact)
"""

import json
import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from atg_intake.config import get_settings
from .models import ContactInfo, ContactSyncPayload

logger = logging.getLogger(__name__)


class ContactSyncError(Exception):
    """Base exception for contact sync errors."""

    def __init__(self, message: str, status_code: Optional[int] = None, response_body: Optional[Dict] = None):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class ContactSyncAuthError(ContactSyncError):
    """Authentication/authorization error (401/403)."""
    pass


class ContactSyncRateLimitError(ContactSyncError):
    """Rate limit exceeded (429)."""

    def __init__(self, message: str, retry_after: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class ContactSyncValidationError(ContactSyncError):
    """CRM rejected the payload (400/422)."""
    pass


class ContactSyncClient:
    """
    CRM webhook client.

    - Retries on rate limits and timeouts (up to 3 attempts)
    - Maps HTTP errors to ContactSyncError subclasses
    """

    MAX_RETRIES = 3
    RETRY_BACKOFF = 2.0  # seconds

    def __init__(
        self,
        url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Args:
            url: webhook URL (defaults to CONTACT_SYNC_URL)
            api_key: bearer token (defaults to CONTACT_SYNC_API_KEY)
            timeout: request timeout in seconds
            transport: custom httpx transport (tests)
        """
        settings = get_settings()
        self.url = url if url is not None else settings.contact_sync_url
        self.api_key = api_key if api_key is not None else settings.contact_sync_api_key
        self.timeout = timeout if timeout is not None else settings.contact_sync_timeout
        self._transport = transport

        if not self.url:
            logger.warning("CONTACT_SYNC_URL not configured")

    @property
    def is_configured(self) -> bool:
        return bool(self.url)

    def _get_headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    def _handle_response(self, response: httpx.Response) -> Dict[str, Any]:
        """Return the JSON body or raise the matching ContactSyncError."""
        if 200 <= response.status_code < 300:
            if not response.content:
                return {}
            try:
                return response.json()
            except json.JSONDecodeError:
                return {"raw": response.text}

        try:
            error_body = response.json() if response.content else {}
        except json.JSONDecodeError:
            error_body = {"raw": response.text}

        status = response.status_code

        if status in (401, 403):
            raise ContactSyncAuthError(
                f"CRM rejected credentials ({status})",
                status_code=status,
                response_body=error_body,
            )

        if status in (400, 422):
            raise ContactSyncValidationError(
                f"CRM rejected contact payload ({status}): {error_body}",
                status_code=status,
                response_body=error_body,
            )

        if status == 429:
            retry_after = response.headers.get("Retry-After")
            try:
                retry_after_s = float(retry_after) if retry_after else None
            except ValueError:
                retry_after_s = None
            raise ContactSyncRateLimitError(
                "CRM rate limit exceeded",
                retry_after=retry_after_s,
                status_code=429,
                response_body=error_body,
            )

        raise ContactSyncError(
            f"CRM error ({status}): {error_body}",
            status_code=status,
            response_body=error_body,
        )

    def _post(self, body: Dict[str, Any]) -> Dict[str, Any]:
        for attempt in range(self.MAX_RETRIES):
            try:
                with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                    response = client.post(self.url, headers=self._get_headers(), json=body)
                    return self._handle_response(response)

            except ContactSyncRateLimitError as e:
                if attempt < self.MAX_RETRIES - 1:
                    wait_time = e.retry_after or (self.RETRY_BACKOFF * (attempt + 1))
                    logger.warning(f"Rate limited, waiting {wait_time}s (attempt {attempt + 1}/{self.MAX_RETRIES})")
                    time.sleep(wait_time)
                else:
                    raise
            except httpx.TimeoutException:
                if attempt < self.MAX_RETRIES - 1:
                    logger.warning(f"Request timeout, retrying (attempt {attempt + 1}/{self.MAX_RETRIES})")
                    time.sleep(self.RETRY_BACKOFF)
                else:
                    raise ContactSyncError(f"Request timeout after {self.MAX_RETRIES} attempts")
            except httpx.RequestError as e:
                raise ContactSyncError(f"Request failed: {e}")

    def sync_contact(self, contact: ContactInfo, tags: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Send one contact to the CRM.

        Returns:
            CRM response body ({} if empty)

        Raises:
            ContactSyncError: not configured, or the CRM call failed
        """
        if not self.is_configured:
            raise ContactSyncError("Contact sync not configured. Set CONTACT_SYNC_URL.")

        payload = ContactSyncPayload.from_contact(contact, tags=tags)
        result = self._post(payload.model_dump())
        logger.info(f"Synced contact {contact.email} to CRM")
        return result


def sync_contact_in_background(contact: ContactInfo, tags: Optional[List[str]] = None) -> bool:
    """
    Fire-and-forget wrapper for request handlers.

    Failures are logged, never raised.

    Returns:
        True if the CRM accepted the contact
    """
    client = ContactSyncClient()
    if not client.is_configured:
        logger.info(f"Contact sync skipped for {contact.email}: not configured")
        return False
    try:
        client.sync_contact(contact, tags=tags)
        return True
    except ContactSyncError as e:
        logger.error(f"Contact sync failed for {contact.email}: {e}")
        return False
