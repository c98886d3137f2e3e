"""
Question Visibility

A question with `conditional_on` is shown only when the earlier answer it
depends on matches. Visibility is recomputed from the answers every time;
nothing is cached.

Hiding a question does NOT clear its answer. `prune_hidden_answers` is the
explicit opt-in for callers that want hidden answers dropped before results
are evaluated.
"""

from typing import Iterable, List

from atg_intake.catalog.models import Question, Section
from atg_intake.conditions.evaluate import is_member, strict_equals
from atg_intake.conditions.models import Answers


def is_visible(question: Question, answers: Answers) -> bool:
    """
    Should this question be shown for these answers?

    - no dependency: always visible
    - list of accepted values: visible if the answer's string form is one of them
    - single value: visible if the answer equals it exactly (type-sensitive)
    """
    dep = question.conditional_on
    if dep is None:
        return True

    dependent_answer = answers.get(dep.question_id)
    if isinstance(dep.value, list):
        return is_member(dependent_answer, dep.value)
    return strict_equals(dependent_answer, dep.value)


def visible_questions(section: Section, answers: Answers) -> List[Question]:
    """Visible questions of a section, in flow order."""
    return [q for q in section.questions if is_visible(q, answers)]


def section_has_answers(section: Section, answers: Answers) -> bool:
    """True if any visible question in the section has been answered."""
    return any(q.id in answers for q in visible_questions(section, answers))


def prune_hidden_answers(sections: Iterable[Section], answers: Answers) -> Answers:
    """
    Drop answers to questions that are currently hidden.

    Walks the flow in order against the pruned answers, so a question hidden
    only because its (now pruned) parent was hidden is pruned too. Answers to
    ids that are not questions in the flow are kept.

    Returns:
        A new answers dict; the input is not modified
    """
    pruned = dict(answers)
    for section in sections:
        for question in section.questions:
            if question.id in pruned and not is_visible(question, pruned):
                del pruned[question.id]
    return pruned
