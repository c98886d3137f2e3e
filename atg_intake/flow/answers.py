"""
Answer Input Handling

Turns raw input (form fields, terminal input, JSON) into the value stored in
the answer store, per question type:

- yes-no: "yes" / "no"
- single-choice: one of the option values
- numeric: int/float clamped into [min, max]; empty input stores ""
- text: trimmed string
"""

import math
from typing import Any, List, Union

from atg_intake.catalog.models import Question, QuestionType, Section
from atg_intake.conditions.models import Answers, AnswerValue
from .visibility import visible_questions

YES_NO_ALIASES = {
    "yes": "yes",
    "y": "yes",
    "no": "no",
    "n": "no",
}


class AnswerValidationError(ValueError):
    """Raw input is not an acceptable answer for the question."""

    def __init__(self, question_id: str, message: str):
        super().__init__(message)
        self.question_id = question_id
        self.message = message


def _coerce_yes_no(question: Question, raw: Any) -> str:
    value = YES_NO_ALIASES.get(str(raw).strip().lower())
    if value is None:
        raise AnswerValidationError(question.id, f"Answer must be yes or no, got '{raw}'")
    return value


def _coerce_choice(question: Question, raw: Any) -> str:
    options = question.options or []
    text = str(raw).strip()

    for option in options:
        if option.value == text:
            return option.value

    # Terminal input: 1-based option number or label
    if text.isascii() and text.isdecimal() and 1 <= int(text) <= len(options):
        return options[int(text) - 1].value
    for option in options:
        if option.label.lower() == text.lower() or option.value.lower() == text.lower():
            return option.value

    allowed = ", ".join(o.value for o in options)
    raise AnswerValidationError(question.id, f"Answer must be one of: {allowed}")


def _coerce_numeric(question: Question, raw: Any) -> Union[int, float, str]:
    if raw is None or (isinstance(raw, str) and raw.strip() == ""):
        return ""

    if isinstance(raw, bool):
        raise AnswerValidationError(question.id, "Answer must be a number")

    if isinstance(raw, (int, float)):
        number = raw
    else:
        text = str(raw).strip().replace(",", "").lstrip("$")
        try:
            number = float(text)
        except ValueError:
            raise AnswerValidationError(question.id, f"Answer must be a number, got '{raw}'")

    try:
        finite = math.isfinite(number)
    except OverflowError:
        # int beyond float range
        finite = False
    if not finite:
        raise AnswerValidationError(question.id, "Answer must be a finite number")

    bounds = question.validation
    if bounds is not None:
        if bounds.max is not None and number > bounds.max:
            number = bounds.max
        elif bounds.min is not None and number < bounds.min:
            number = bounds.min

    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def coerce_answer(question: Question, raw: Any) -> AnswerValue:
    """
    Convert raw input into a stored answer.

    Raises:
        AnswerValidationError: input not acceptable for the question type
    """
    if question.type == QuestionType.YES_NO:
        return _coerce_yes_no(question, raw)
    if question.type == QuestionType.SINGLE_CHOICE:
        return _coerce_choice(question, raw)
    if question.type == QuestionType.NUMERIC:
        return _coerce_numeric(question, raw)
    if question.type == QuestionType.TEXT:
        return "" if raw is None else str(raw).strip()

    raise AnswerValidationError(question.id, f"Unsupported question type: {question.type}")


def is_answered(answers: Answers, question_id: str) -> bool:
    value = answers.get(question_id)
    return value is not None and value != ""


def missing_required(section: Section, answers: Answers) -> List[str]:
    """Ids of visible required questions without an answer."""
    return [
        q.id for q in visible_questions(section, answers)
        if q.required and not is_answered(answers, q.id)
    ]
