"""
Questionnaire Catalog

Static questionnaire content: welcome copy, sections of questions, result
writeups with their rules, and thank-you copy. Loaded once and read-only.

Version: catalog_v1
"""

from .models import (
    QuestionType,
    ChoiceOption,
    QuestionValidation,
    ConditionalOn,
    Question,
    Section,
    Welcome,
    ThankYou,
    Questionnaire,
    CatalogIssue,
)
from .loader import (
    CatalogError,
    QuestionnaireLoader,
    load_questionnaire,
    validate_questionnaire,
    get_loader,
    get_questionnaire,
)

__all__ = [
    "QuestionType",
    "ChoiceOption",
    "QuestionValidation",
    "ConditionalOn",
    "Question",
    "Section",
    "Welcome",
    "ThankYou",
    "Questionnaire",
    "CatalogIssue",
    "CatalogError",
    "QuestionnaireLoader",
    "load_questionnaire",
    "validate_questionnaire",
    "get_loader",
    "get_questionnaire",
]

__version__ = "catalog_v1"
