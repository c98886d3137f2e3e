"""
Questionnaire Wizard

Single-user, in-memory navigation through the questionnaire:

    user_info -> welcome -> questionnaire (section 1..N) -> results
                                  ^                           |
                                  +-------- review -----------+

Answers live only as long as the wizard object. Reviewing keeps them.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from atg_intake.catalog.models import Question, Questionnaire, Section
from atg_intake.conditions.evaluate import evaluate_results
from atg_intake.conditions.models import Answers, AnswerValue, ResultDefinition
from atg_intake.contacts.models import ContactInfo
from .answers import coerce_answer, missing_required
from .visibility import is_visible, prune_hidden_answers, section_has_answers, visible_questions

logger = logging.getLogger(__name__)


class Screen(str, Enum):
    USER_INFO = "user_info"
    WELCOME = "welcome"
    QUESTIONNAIRE = "questionnaire"
    RESULTS = "results"


class WizardStateError(RuntimeError):
    """Operation not allowed on the current screen."""


@dataclass(frozen=True)
class Progress:
    current: int
    total: int
    section_title: str

    @property
    def percentage(self) -> float:
        return (self.current / self.total) * 100 if self.total else 0.0


class QuestionnaireWizard:
    """
    Drives one client through the questionnaire.

    Args:
        questionnaire: catalog to walk
        prune_hidden: drop answers to hidden questions before evaluating
    """

    def __init__(self, questionnaire: Questionnaire, prune_hidden: bool = False):
        if not questionnaire.sections:
            raise ValueError("Questionnaire has no sections")
        self.questionnaire = questionnaire
        self.prune_hidden = prune_hidden
        self.screen = Screen.USER_INFO
        self.contact: Optional[ContactInfo] = None
        self.section_index = 0
        self._answers: Answers = {}

    # ----- state -----

    @property
    def answers(self) -> Answers:
        """Copy of the answer store."""
        return dict(self._answers)

    @property
    def total_sections(self) -> int:
        return len(self.questionnaire.sections)

    @property
    def current_section(self) -> Section:
        return self.questionnaire.sections[self.section_index]

    @property
    def is_last_section(self) -> bool:
        return self.section_index == self.total_sections - 1

    def _require(self, *screens: Screen) -> None:
        if self.screen not in screens:
            allowed = ", ".join(s.value for s in screens)
            raise WizardStateError(f"Not allowed on '{self.screen.value}' screen (needs {allowed})")

    # ----- transitions -----

    def submit_contact(self, contact: ContactInfo) -> None:
        self._require(Screen.USER_INFO)
        self.contact = contact
        self.screen = Screen.WELCOME

    def start(self) -> None:
        self._require(Screen.WELCOME)
        self.section_index = 0
        self.screen = Screen.QUESTIONNAIRE

    def next_section(self) -> Screen:
        """Advance one section, or to results from the last one."""
        self._require(Screen.QUESTIONNAIRE)
        if self.is_last_section:
            self.screen = Screen.RESULTS
        else:
            self.section_index += 1
        return self.screen

    def previous_section(self) -> None:
        self._require(Screen.QUESTIONNAIRE)
        if self.section_index > 0:
            self.section_index -= 1

    def review(self) -> None:
        """Back to the first section with all answers kept."""
        self._require(Screen.RESULTS)
        self.section_index = 0
        self.screen = Screen.QUESTIONNAIRE

    # ----- questions -----

    def visible_questions(self) -> List[Question]:
        return visible_questions(self.current_section, self._answers)

    def section_has_answers(self) -> bool:
        return section_has_answers(self.current_section, self._answers)

    def missing_required(self) -> List[str]:
        return missing_required(self.current_section, self._answers)

    def answer(self, question_id: str, raw: Any) -> AnswerValue:
        """
        Store an answer for a visible question of the current section.

        Raises:
            WizardStateError: not on a questionnaire screen, or the question
                is not a visible question of the current section
            AnswerValidationError: raw input not acceptable
        """
        self._require(Screen.QUESTIONNAIRE)
        question = next((q for q in self.current_section.questions if q.id == question_id), None)
        if question is None:
            raise WizardStateError(f"Question '{question_id}' is not in section '{self.current_section.id}'")
        if not is_visible(question, self._answers):
            raise WizardStateError(f"Question '{question_id}' is not currently shown")

        value = coerce_answer(question, raw)
        self._answers[question_id] = value
        logger.debug(f"Answered {question_id}={value!r}")
        return value

    def progress(self) -> Progress:
        return Progress(
            current=self.section_index + 1,
            total=self.total_sections,
            section_title=self.current_section.title,
        )

    # ----- results -----

    def evaluation_answers(self) -> Answers:
        if self.prune_hidden:
            return prune_hidden_answers(self.questionnaire.sections, self._answers)
        return dict(self._answers)

    def results(self) -> List[ResultDefinition]:
        self._require(Screen.RESULTS)
        return evaluate_results(self.evaluation_answers(), self.questionnaire.results)
