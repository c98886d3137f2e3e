"""
Questionnaire Catalog - Models

Pydantic models for the static questionnaire document:
- Question / Section: the question flow
- ConditionalOn: single dependency deciding whether a question is shown
- Welcome / ThankYou: copy shown before and after the questions
- Questionnaire: the whole document, including result definitions
- CatalogIssue: warnings/errors from catalog validation

Version: catalog_v1
"""

from enum import Enum
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from atg_intake.conditions.models import ResultDefinition


class QuestionType(str, Enum):
    """Closed set of question input types."""
    YES_NO = "yes-no"
    SINGLE_CHOICE = "single-choice"
    NUMERIC = "numeric"
    TEXT = "text"


class ChoiceOption(BaseModel):
    value: str
    label: str


class QuestionValidation(BaseModel):
    min: Optional[float] = None
    max: Optional[float] = None
    required: bool = False


class ConditionalOn(BaseModel):
    """
    Show the question only when an earlier answer matches.

    A list value accepts any of its members (compared as strings); a scalar
    value must match exactly.
    """
    question_id: str
    value: Union[List[str], str, int, float]


class Question(BaseModel):
    id: str
    text: str
    type: QuestionType
    options: Optional[List[ChoiceOption]] = None
    validation: Optional[QuestionValidation] = None
    conditional_on: Optional[ConditionalOn] = None

    @property
    def required(self) -> bool:
        return bool(self.validation and self.validation.required)


class Section(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    questions: List[Question] = Field(default_factory=list)


class Welcome(BaseModel):
    title: str
    introduction: List[str] = Field(default_factory=list)
    areas: List[str] = Field(default_factory=list)
    disclaimer: str = ""
    compliance: str = ""


class ThankYou(BaseModel):
    title: str
    introduction: str = ""
    benefits: List[str] = Field(default_factory=list)
    goals: List[str] = Field(default_factory=list)
    closing_statement: str = ""


class Questionnaire(BaseModel):
    """
    The complete questionnaire document.

    Static and read-only once loaded.
    """
    version: str = "questionnaire_v1"
    welcome: Welcome
    sections: List[Section]
    results: List[ResultDefinition] = Field(default_factory=list)
    thank_you: ThankYou

    def iter_questions(self):
        """Questions in flow order."""
        for section in self.sections:
            for question in section.questions:
                yield question

    def question_index(self) -> Dict[str, Question]:
        return {q.id: q for q in self.iter_questions()}

    def get_question(self, question_id: str) -> Optional[Question]:
        return self.question_index().get(question_id)

    def get_section(self, section_id: str) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def get_result(self, result_id: str) -> Optional[ResultDefinition]:
        for result in self.results:
            if result.id == result_id:
                return result
        return None


class CatalogIssue(BaseModel):
    """Single catalog validation warning or error."""
    code: str
    severity: str  # "warning" or "error"
    message: str
    field: Optional[str] = None
