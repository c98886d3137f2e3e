"""
Questionnaire Flow Endpoints

POST /api/v1/questionnaire/visibility      - Visible questions for a set of answers
POST /api/v1/questionnaire/answers/coerce  - Validate and normalize one raw answer

Stateless: the client sends its full answer set with every request.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from atg_intake.catalog.loader import get_questionnaire
from atg_intake.catalog.models import Questionnaire
from atg_intake.conditions.models import AnswerValue
from .answers import AnswerValidationError, coerce_answer, missing_required
from .visibility import prune_hidden_answers, section_has_answers, visible_questions

router = APIRouter(
    prefix="/api/v1/questionnaire",
    tags=["questionnaire"],
)


class VisibilityRequest(BaseModel):
    answers: Dict[str, AnswerValue] = Field(default_factory=dict)
    section_id: Optional[str] = Field(
        default=None,
        description="Limit the response to one section"
    )


class SectionVisibility(BaseModel):
    section_id: str
    visible_question_ids: List[str] = Field(
        description="Questions whose own display condition holds against the submitted answers"
    )
    effective_visible_question_ids: List[str] = Field(
        description="Visible questions once answers to hidden questions are discarded in flow order"
    )
    has_answers: bool
    missing_required: List[str]


class VisibilityResponse(BaseModel):
    sections: List[SectionVisibility]
    hidden_answered_question_ids: List[str] = Field(
        description="Answered questions that are currently hidden (stale answers)"
    )


class CoerceRequest(BaseModel):
    question_id: str
    raw: Any = None


class CoerceResponse(BaseModel):
    question_id: str
    value: AnswerValue


@router.post("/visibility", response_model=VisibilityResponse)
async def visibility_endpoint(
    request: VisibilityRequest,
    questionnaire: Questionnaire = Depends(get_questionnaire),
):
    sections = questionnaire.sections
    if request.section_id is not None:
        section = questionnaire.get_section(request.section_id)
        if section is None:
            raise HTTPException(status_code=404, detail=f"Section not found: {request.section_id}")
        sections = [section]

    answers = request.answers
    pruned = prune_hidden_answers(questionnaire.sections, answers)

    return VisibilityResponse(
        sections=[
            SectionVisibility(
                section_id=section.id,
                visible_question_ids=[q.id for q in visible_questions(section, answers)],
                effective_visible_question_ids=[q.id for q in visible_questions(section, pruned)],
                has_answers=section_has_answers(section, answers),
                missing_required=missing_required(section, answers),
            )
            for section in sections
        ],
        hidden_answered_question_ids=sorted(set(answers) - set(pruned)),
    )


@router.post("/answers/coerce", response_model=CoerceResponse)
async def coerce_answer_endpoint(
    request: CoerceRequest,
    questionnaire: Questionnaire = Depends(get_questionnaire),
):
    question = questionnaire.get_question(request.question_id)
    if question is None:
        raise HTTPException(status_code=404, detail=f"Question not found: {request.question_id}")

    try:
        value = coerce_answer(question, request.raw)
    except AnswerValidationError as e:
        raise HTTPException(status_code=422, detail=e.message)

    return CoerceResponse(question_id=question.id, value=value)
