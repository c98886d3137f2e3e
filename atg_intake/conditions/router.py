"""
Result Evaluation Endpoints

POST /api/v1/results/evaluate - Strategies that apply to a set of answers
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from atg_intake.catalog.loader import get_questionnaire
from atg_intake.catalog.models import Questionnaire
from atg_intake.config import get_settings
from atg_intake.export.markup import parse_content
from atg_intake.flow.visibility import prune_hidden_answers
from .evaluate import ResultTrace, evaluate_results, evaluate_with_trace, evaluation_hash
from .models import Answers, AnswerValue

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/results",
    tags=["results"],
)


class EvaluateRequest(BaseModel):
    answers: Dict[str, AnswerValue] = Field(default_factory=dict)
    prune_hidden: Optional[bool] = Field(
        default=None,
        description="Ignore answers to hidden questions (defaults to ATG_PRUNE_HIDDEN_ANSWERS)"
    )
    explain: bool = Field(
        default=False,
        description="Include per-result trace of the first failing comparison"
    )


class EvaluatedResult(BaseModel):
    id: str
    title: str
    content: str
    blocks: List[Dict[str, Any]]


class EvaluateResponse(BaseModel):
    success: bool = True
    questionnaire_version: str
    matched_count: int
    results: List[EvaluatedResult]
    evaluation_hash: str
    pruned_question_ids: List[str] = Field(default_factory=list)
    trace: Optional[List[ResultTrace]] = None
    generated_at: datetime = Field(default_factory=datetime.utcnow)


def resolve_answers(
    questionnaire: Questionnaire,
    answers: Answers,
    prune_hidden: Optional[bool],
) -> Answers:
    """Answers to evaluate, pruned when requested or configured."""
    if prune_hidden is None:
        prune_hidden = get_settings().prune_hidden_answers
    if prune_hidden:
        return prune_hidden_answers(questionnaire.sections, answers)
    return dict(answers)


@router.post("/evaluate", response_model=EvaluateResponse)
async def evaluate_endpoint(
    request: EvaluateRequest,
    questionnaire: Questionnaire = Depends(get_questionnaire),
):
    """
    Evaluate answers against every result rule.

    Results come back in questionnaire order with their writeup split into
    heading, bullet and paragraph blocks.
    """
    try:
        answers = resolve_answers(questionnaire, request.answers, request.prune_hidden)
        matched = evaluate_results(answers, questionnaire.results)

        return EvaluateResponse(
            questionnaire_version=questionnaire.version,
            matched_count=len(matched),
            results=[
                EvaluatedResult(
                    id=r.id,
                    title=r.title,
                    content=r.content,
                    blocks=[block.to_dict() for block in parse_content(r.content)],
                )
                for r in matched
            ],
            evaluation_hash=evaluation_hash(answers, matched),
            pruned_question_ids=sorted(set(request.answers) - set(answers)),
            trace=evaluate_with_trace(answers, questionnaire.results) if request.explain else None,
        )

    except Exception as e:
        logger.error(f"Evaluation error: {e}")
        raise HTTPException(status_code=500, detail=f"Evaluation error: {str(e)}")
