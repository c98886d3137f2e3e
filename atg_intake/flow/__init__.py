"""
Questionnaire Flow

Which questions are shown, how raw input becomes an answer, and how a single
client moves through the sections.

Version: flow_v1
"""

from .visibility import (
    is_visible,
    visible_questions,
    section_has_answers,
    prune_hidden_answers,
)
from .answers import (
    AnswerValidationError,
    coerce_answer,
    is_answered,
    missing_required,
)
from .wizard import (
    Progress,
    QuestionnaireWizard,
    Screen,
    WizardStateError,
)

__all__ = [
    "is_visible",
    "visible_questions",
    "section_has_answers",
    "prune_hidden_answers",
    "AnswerValidationError",
    "coerce_answer",
    "is_answered",
    "missing_required",
    "Progress",
    "QuestionnaireWizard",
    "Screen",
    "WizardStateError",
]

__version__ = "flow_v1"
