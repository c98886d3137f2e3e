"""
Questionnaire Catalog - Loader

Loads the questionnaire JSON document once and caches it in memory.

The packaged document lives in `data/questionnaire.json`; ATG_QUESTIONNAIRE_PATH
points the loader at a different one.

Validation checks the invariants the rest of the system relies on:
- ids are unique (questions, sections, results)
- conditional questions depend on a question EARLIER in the flow
- single-choice questions have options, numeric bounds are ordered
- result rules use known operators with a usable value

Errors stop the load in strict mode; warnings are only logged.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from pydantic import ValidationError

from atg_intake.config import get_settings
from atg_intake.conditions.models import (
    COMPARISON_OPERATORS,
    GROUP_OPERATORS,
    Operator,
)
from .models import CatalogIssue, Question, QuestionType, Questionnaire

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).parent / "data"
QUESTIONNAIRE_FILE = "questionnaire.json"

NUMERIC_OPERATORS = frozenset({Operator.GREATER_THAN.value, Operator.LESS_THAN.value})


class CatalogError(Exception):
    """Questionnaire document could not be loaded or is invalid."""

    def __init__(self, message: str, issues: Optional[List[CatalogIssue]] = None):
        super().__init__(message)
        self.issues = issues or []


def load_questionnaire(path: Optional[Union[str, Path]] = None) -> Questionnaire:
    """
    Read and parse a questionnaire document.

    Args:
        path: JSON document (defaults to the packaged questionnaire)

    Raises:
        CatalogError: file missing or unreadable, not JSON, or not a questionnaire
    """
    path = Path(path) if path else DATA_DIR / QUESTIONNAIRE_FILE
    if not path.exists():
        raise CatalogError(f"Questionnaire not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise CatalogError(f"Questionnaire is not valid JSON ({path}): {e}")
    except (OSError, UnicodeDecodeError) as e:
        raise CatalogError(f"Questionnaire could not be read ({path}): {e}")

    try:
        return Questionnaire.model_validate(raw)
    except ValidationError as e:
        raise CatalogError(f"Questionnaire does not match schema ({path}): {e}")


def _check_questions(questionnaire: Questionnaire, issues: List[CatalogIssue]) -> None:
    seen_sections = set()
    for section in questionnaire.sections:
        if section.id in seen_sections:
            issues.append(CatalogIssue(
                code="DUPLICATE_SECTION_ID",
                severity="error",
                message=f"Section id '{section.id}' is used more than once",
                field=section.id,
            ))
        seen_sections.add(section.id)

    all_ids = {q.id for q in questionnaire.iter_questions()}
    earlier = set()
    for question in questionnaire.iter_questions():
        if question.id in earlier:
            issues.append(CatalogIssue(
                code="DUPLICATE_QUESTION_ID",
                severity="error",
                message=f"Question id '{question.id}' is used more than once",
                field=question.id,
            ))

        dep = question.conditional_on
        if dep is not None:
            if dep.question_id == question.id:
                issues.append(CatalogIssue(
                    code="CONDITIONAL_SELF_REFERENCE",
                    severity="error",
                    message=f"Question '{question.id}' depends on itself",
                    field=question.id,
                ))
            elif dep.question_id not in all_ids:
                issues.append(CatalogIssue(
                    code="CONDITIONAL_UNKNOWN_QUESTION",
                    severity="error",
                    message=f"Question '{question.id}' depends on unknown question '{dep.question_id}'",
                    field=question.id,
                ))
            elif dep.question_id not in earlier:
                issues.append(CatalogIssue(
                    code="CONDITIONAL_FORWARD_REFERENCE",
                    severity="error",
                    message=f"Question '{question.id}' depends on later question '{dep.question_id}'",
                    field=question.id,
                ))

        _check_input(question, issues)
        earlier.add(question.id)


def _check_input(question: Question, issues: List[CatalogIssue]) -> None:
    if question.type == QuestionType.SINGLE_CHOICE and not question.options:
        issues.append(CatalogIssue(
            code="CHOICE_WITHOUT_OPTIONS",
            severity="error",
            message=f"Single-choice question '{question.id}' has no options",
            field=question.id,
        ))

    bounds = question.validation
    if bounds and bounds.min is not None and bounds.max is not None and bounds.min > bounds.max:
        issues.append(CatalogIssue(
            code="INVALID_BOUNDS",
            severity="error",
            message=f"Question '{question.id}' has min {bounds.min} > max {bounds.max}",
            field=question.id,
        ))


def _check_comparison(result_id, question_ids, question_id, operator, value, issues) -> None:
    where = f"{result_id}.{question_id}"

    if question_id not in question_ids:
        issues.append(CatalogIssue(
            code="RULE_UNKNOWN_QUESTION",
            severity="warning",
            message=f"Result '{result_id}' references unknown question '{question_id}'",
            field=where,
        ))

    if operator not in COMPARISON_OPERATORS:
        issues.append(CatalogIssue(
            code="UNKNOWN_OPERATOR",
            severity="warning",
            message=f"Result '{result_id}' uses operator '{operator}' which never matches",
            field=where,
        ))
        return

    if value is None:
        issues.append(CatalogIssue(
            code="MISSING_VALUE",
            severity="warning",
            message=f"Result '{result_id}' compares '{question_id}' without a value",
            field=where,
        ))
    elif operator == Operator.INCLUDES.value and not isinstance(value, list):
        issues.append(CatalogIssue(
            code="INCLUDES_REQUIRES_LIST",
            severity="warning",
            message=f"Result '{result_id}' uses 'includes' on '{question_id}' with a non-list value",
            field=where,
        ))
    elif operator in NUMERIC_OPERATORS and not isinstance(value, (int, float)):
        issues.append(CatalogIssue(
            code="NUMERIC_COMPARISON_REQUIRES_NUMBER",
            severity="warning",
            message=f"Result '{result_id}' uses '{operator}' on '{question_id}' with a non-numeric value",
            field=where,
        ))


def _check_results(questionnaire: Questionnaire, issues: List[CatalogIssue]) -> None:
    question_ids = {q.id for q in questionnaire.iter_questions()}
    seen = set()

    for result in questionnaire.results:
        if result.id in seen:
            issues.append(CatalogIssue(
                code="DUPLICATE_RESULT_ID",
                severity="error",
                message=f"Result id '{result.id}' is used more than once",
                field=result.id,
            ))
        seen.add(result.id)

        for condition in result.conditions:
            subs = condition.sub_conditions or []
            if condition.operator in GROUP_OPERATORS:
                if not subs:
                    issues.append(CatalogIssue(
                        code="GROUP_WITHOUT_SUB_CONDITIONS",
                        severity="warning",
                        message=f"Result '{result.id}' has an '{condition.operator}' condition with no sub-conditions; it always holds",
                        field=f"{result.id}.{condition.question_id}",
                    ))
            else:
                _check_comparison(
                    result.id, question_ids,
                    condition.question_id, condition.operator, condition.value,
                    issues,
                )
            for sub in subs:
                _check_comparison(
                    result.id, question_ids,
                    sub.question_id, sub.operator, sub.value,
                    issues,
                )


def validate_questionnaire(questionnaire: Questionnaire) -> List[CatalogIssue]:
    """
    Check catalog invariants.

    Returns:
        Issues found, errors and warnings, in document order
    """
    issues: List[CatalogIssue] = []
    _check_questions(questionnaire, issues)
    _check_results(questionnaire, issues)
    return issues


# ============================================================
# SINGLETON CACHE
# ============================================================

class QuestionnaireLoader:
    """
    Singleton loader for the questionnaire document.
    Loads once at startup and caches in memory.
    """
    _instance = None
    _loaded = False

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, path: Optional[Union[str, Path]] = None, strict: Optional[bool] = None):
        if not QuestionnaireLoader._loaded:
            settings = get_settings()
            self._path = path or settings.questionnaire_path
            self._strict = settings.catalog_strict if strict is None else strict
            self._questionnaire: Optional[Questionnaire] = None
            self._issues: List[CatalogIssue] = []
            self._load_data()
            QuestionnaireLoader._loaded = True

    @classmethod
    def reset(cls):
        """Reset the singleton for testing purposes."""
        cls._instance = None
        cls._loaded = False

    def _load_data(self):
        questionnaire = load_questionnaire(self._path)
        issues = validate_questionnaire(questionnaire)

        for issue in issues:
            if issue.severity == "error":
                logger.error(f"CATALOG_ERROR {issue.code}: {issue.message}")
            else:
                logger.warning(f"CATALOG_WARNING {issue.code}: {issue.message}")

        errors = [i for i in issues if i.severity == "error"]
        if errors and self._strict:
            raise CatalogError(
                f"Questionnaire has {len(errors)} validation error(s)",
                issues=issues,
            )

        self._questionnaire = questionnaire
        self._issues = issues
        question_count = sum(len(s.questions) for s in questionnaire.sections)
        logger.info(
            f"Loaded questionnaire {questionnaire.version}: "
            f"{len(questionnaire.sections)} sections, {question_count} questions, "
            f"{len(questionnaire.results)} results"
        )

    @property
    def questionnaire(self) -> Questionnaire:
        return self._questionnaire

    @property
    def issues(self) -> List[CatalogIssue]:
        return list(self._issues)


def get_loader() -> QuestionnaireLoader:
    """Get the singleton loader."""
    return QuestionnaireLoader()


def get_questionnaire() -> Questionnaire:
    """Get the cached questionnaire."""
    return get_loader().questionnaire
