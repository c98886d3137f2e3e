"""
Results Export Endpoints

POST /api/v1/results/export/pdf - Branded results PDF for a set of answers
"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from atg_intake.catalog.loader import get_questionnaire
from atg_intake.catalog.models import Questionnaire
from atg_intake.conditions.evaluate import evaluate_results
from atg_intake.conditions.models import AnswerValue
from atg_intake.conditions.router import resolve_answers
from atg_intake.config import get_settings
from atg_intake.contacts.models import ContactInfo
from .pdf import ExportError, ResultsPDFExporter

router = APIRouter(
    prefix="/api/v1/results",
    tags=["results"],
)


class ExportPDFRequest(BaseModel):
    answers: Dict[str, AnswerValue] = Field(default_factory=dict)
    contact: Optional[ContactInfo] = None
    prune_hidden: Optional[bool] = None


@router.post("/export/pdf")
async def export_pdf_endpoint(
    request: ExportPDFRequest,
    questionnaire: Questionnaire = Depends(get_questionnaire),
):
    answers = resolve_answers(questionnaire, request.answers, request.prune_hidden)
    matched = evaluate_results(answers, questionnaire.results)

    exporter = ResultsPDFExporter(branding=get_settings().branding)
    try:
        pdf = exporter.generate_pdf(matched, questionnaire.thank_you, contact=request.contact)
    except ExportError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="tax-planning-results.pdf"'},
    )
