"""
Health Check Endpoint
=====================
Reports whether the questionnaire catalog is loaded and the CRM sync is configured.
"""

from datetime import datetime

from fastapi import APIRouter

from atg_intake import __version__
from atg_intake.config import get_settings

router = APIRouter(prefix="/api/v1/health", tags=["Health"])


@router.get("")
def health():
    """
    Service health.

    A catalog that fails to load is reported as "error" rather than raised,
    so the endpoint stays reachable while the data file is being fixed.
    """
    from atg_intake.catalog.loader import CatalogError, get_loader

    settings = get_settings()
    status = {
        "timestamp": datetime.utcnow().isoformat() + "Z",
        "api_version": __version__,
        "environment": settings.env,
        "components": {},
    }

    try:
        loader = get_loader()
        questionnaire = loader.questionnaire
        status["components"]["catalog"] = {
            "status": "healthy",
            "version": questionnaire.version,
            "sections": len(questionnaire.sections),
            "questions": sum(1 for _ in questionnaire.iter_questions()),
            "results": len(questionnaire.results),
            "warnings": sum(1 for i in loader.issues if i.severity == "warning"),
        }
    except CatalogError as e:
        status["components"]["catalog"] = {"status": "error", "error": str(e)}

    status["components"]["contact_sync"] = {
        "status": "configured" if settings.contact_sync_enabled else "disabled",
    }

    status["status"] = "healthy" if status["components"]["catalog"]["status"] == "healthy" else "degraded"
    return status
