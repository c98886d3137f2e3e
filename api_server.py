"""
ATG Tax Planning Intake API
Conditional tax-planning questionnaire with rule-based strategy results.

Routers:
- /api/v1/questionnaire  catalog, visibility, answer coercion
- /api/v1/results        evaluation and PDF export
- /api/v1/contacts       contact capture with background CRM sync
- /api/v1/health         service health
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from atg_intake import __version__
from atg_intake.catalog.loader import get_loader
from atg_intake.catalog.router import router as catalog_router
from atg_intake.conditions.router import router as results_router
from atg_intake.config import get_settings
from atg_intake.contacts.router import router as contacts_router
from atg_intake.export.router import router as export_router
from atg_intake.flow.router import router as flow_router
from atg_intake.health.router import router as health_router

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Load and validate the catalog before accepting requests; strict mode
    # refuses to start on catalog errors.
    questionnaire = get_loader().questionnaire
    logger.info(f"ATG intake API {__version__} ready ({settings.env}, catalog {questionnaire.version})")
    yield


# ============================================
# App Configuration
# ============================================
app = FastAPI(
    title="ATG Tax Planning Intake API",
    description=f"{settings.branding.firm_name} - {settings.branding.product_title}",
    version=__version__,
    lifespan=lifespan,
)

# ============================================
# CORS Configuration
# ============================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials="*" not in settings.cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# ============================================
# Routers
# ============================================
app.include_router(catalog_router)
app.include_router(flow_router)
app.include_router(results_router)
app.include_router(export_router)
app.include_router(contacts_router)
app.include_router(health_router)


@app.get("/")
def root():
    return {
        "service": "ATG Tax Planning Intake API",
        "version": __version__,
        "status": "operational",
        "firm": settings.branding.firm_name,
    }
