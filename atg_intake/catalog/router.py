"""
Questionnaire Catalog Endpoints

GET /api/v1/questionnaire                       - Full questionnaire for the frontend
GET /api/v1/questionnaire/sections/{section_id} - One section
GET /api/v1/questionnaire/issues                - Catalog validation issues
"""

from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from .loader import get_loader, get_questionnaire
from .models import CatalogIssue, Questionnaire, Section, ThankYou, Welcome

router = APIRouter(
    prefix="/api/v1/questionnaire",
    tags=["questionnaire"],
)


class ResultSummary(BaseModel):
    """Result definition without its writeup."""
    id: str
    title: str


class QuestionnaireResponse(BaseModel):
    version: str
    welcome: Welcome
    sections: List[Section]
    results: List[ResultSummary]
    thank_you: ThankYou
    generated_at: datetime = Field(default_factory=datetime.utcnow)


class CatalogIssuesResponse(BaseModel):
    version: str
    error_count: int
    warning_count: int
    issues: List[CatalogIssue]


@router.get("", response_model=QuestionnaireResponse)
async def get_questionnaire_endpoint(questionnaire: Questionnaire = Depends(get_questionnaire)):
    """
    Full questionnaire: welcome copy, sections and questions, result titles,
    thank-you copy. Writeups are returned by /api/v1/results/evaluate.
    """
    return QuestionnaireResponse(
        version=questionnaire.version,
        welcome=questionnaire.welcome,
        sections=questionnaire.sections,
        results=[ResultSummary(id=r.id, title=r.title) for r in questionnaire.results],
        thank_you=questionnaire.thank_you,
    )


@router.get("/sections/{section_id}", response_model=Section)
async def get_section_endpoint(section_id: str, questionnaire: Questionnaire = Depends(get_questionnaire)):
    section = questionnaire.get_section(section_id)
    if section is None:
        raise HTTPException(status_code=404, detail=f"Section not found: {section_id}")
    return section


@router.get("/issues", response_model=CatalogIssuesResponse)
async def get_catalog_issues():
    """Validation issues found when the questionnaire was loaded."""
    loader = get_loader()
    issues = loader.issues
    return CatalogIssuesResponse(
        version=loader.questionnaire.version,
        error_count=sum(1 for i in issues if i.severity == "error"),
        warning_count=sum(1 for i in issues if i.severity == "warning"),
        issues=issues,
    )
