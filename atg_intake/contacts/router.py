"""
Contact Endpoints

POST /api/v1/contacts - Accept contact details and queue the CRM sync
"""

from fastapi import APIRouter, BackgroundTasks

from atg_intake.config import get_settings
from .client import sync_contact_in_background
from .models import ContactAcceptedResponse, ContactInfo

router = APIRouter(
    prefix="/api/v1/contacts",
    tags=["contacts"],
)

CONTACT_TAGS = ["tax-planning-questionnaire", "lead"]


@router.post("", response_model=ContactAcceptedResponse, status_code=202)
async def submit_contact(contact: ContactInfo, background_tasks: BackgroundTasks):
    """
    Accept the client's contact details.

    Validation errors come back as 422. The CRM sync runs after the response
    is sent; its failures are logged only.
    """
    sync_scheduled = get_settings().contact_sync_enabled
    if sync_scheduled:
        background_tasks.add_task(sync_contact_in_background, contact, CONTACT_TAGS)

    return ContactAcceptedResponse(contact=contact, sync_scheduled=sync_scheduled)
