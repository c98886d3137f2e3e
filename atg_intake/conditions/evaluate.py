"""
Result Evaluator

Selects the strategy writeups that apply to a set of answers.

The evaluator is:
- PURE: reads answers and rules, mutates neither
- TOTAL: never raises on answer data; type mismatches, missing answers and
  unknown operators all mean "condition not met"
- ORDER-PRESERVING: matches come back in catalog order, no ranking
- DETERMINISTIC: same answers + same rules -> same output

Authored rules are compiled into a Leaf/AllOf/AnyOf tree before evaluation:

    comparison condition           -> Leaf
    comparison + sub_conditions    -> AllOf([Leaf, *sub leaves])
    "and"/"or" + sub_conditions    -> AllOf([*sub leaves])

"and"/"or" have no predicate of their own, so their sub-conditions decide
(and are always AND-ed). A result's `match` tree is AND-ed on top.

Version: conditions_v1
"""

import logging
from typing import Any, List, Optional, Sequence, Tuple

from pydantic import BaseModel

from atg_intake.shared.hashing import canonicalize_and_hash
from .models import (
    AllOf,
    AnswerValue,
    Answers,
    AnyOf,
    ConditionNode,
    GROUP_OPERATORS,
    Leaf,
    Operator,
    ResultDefinition,
    RuleCondition,
    SubCondition,
    parse_match,
)

logger = logging.getLogger(__name__)


# ============================================================
# VALUE SEMANTICS
# ============================================================

def is_number(value: Any) -> bool:
    """int or float, but never bool."""
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def strict_equals(answer: Any, expected: Any) -> bool:
    """
    Type-sensitive equality.

    A numeric answer never equals a string with the same digits.
    """
    if answer is None or expected is None:
        return False
    if is_number(answer) and is_number(expected):
        return answer == expected
    if isinstance(answer, str) and isinstance(expected, str):
        return answer == expected
    return False


def answer_to_string(answer: Any) -> Optional[str]:
    """
    String form of an answer for set membership.

    Integral floats render without a fractional part, so 60000.0 reads
    as "60000". Missing answers have no string form.
    """
    if answer is None:
        return None
    if isinstance(answer, bool):
        return "true" if answer else "false"
    if isinstance(answer, float) and answer.is_integer():
        return str(int(answer))
    return str(answer)


def is_member(answer: Any, accepted: Any) -> bool:
    """True if the answer's string form is one of the accepted values."""
    if not isinstance(accepted, (list, tuple, set, frozenset)):
        return False
    text = answer_to_string(answer)
    if text is None:
        return False
    return text in {str(v) for v in accepted}


def compare(operator: str, answer: Any, value: Any) -> bool:
    """Evaluate one comparison. Non-comparison operators never match."""
    if operator == Operator.EQUALS.value:
        return strict_equals(answer, value)

    if operator == Operator.GREATER_THAN.value:
        return is_number(answer) and is_number(value) and answer > value

    if operator == Operator.LESS_THAN.value:
        return is_number(answer) and is_number(value) and answer < value

    if operator == Operator.INCLUDES.value:
        return is_member(answer, value)

    return False


# ============================================================
# COMPILATION
# ============================================================

def _leaf(condition: Any) -> Leaf:
    value = condition.value
    if isinstance(value, list):
        value = tuple(value)
    return Leaf(
        question_id=condition.question_id,
        operator=condition.operator,
        value=value,
    )


def compile_condition(condition: RuleCondition) -> ConditionNode:
    """Compile one authored top-level condition."""
    subs: List[SubCondition] = condition.sub_conditions or []
    sub_leaves = tuple(_leaf(sub) for sub in subs)

    if condition.operator in GROUP_OPERATORS:
        return AllOf(sub_leaves)

    main = _leaf(condition)
    if not sub_leaves:
        return main
    return AllOf((main,) + sub_leaves)


def compile_result(result: ResultDefinition) -> ConditionNode:
    """Compile every rule of a result into a single tree."""
    nodes = tuple(compile_condition(c) for c in result.conditions)
    if result.match is not None:
        nodes = nodes + (parse_match(result.match),)
    return AllOf(nodes)


# ============================================================
# EVALUATION
# ============================================================

def evaluate_node(node: ConditionNode, answers: Answers) -> bool:
    """Evaluate a condition tree against answers (short-circuiting)."""
    if isinstance(node, Leaf):
        return compare(node.operator, answers.get(node.question_id), node.value)
    if isinstance(node, AllOf):
        return all(evaluate_node(child, answers) for child in node.nodes)
    if isinstance(node, AnyOf):
        return any(evaluate_node(child, answers) for child in node.nodes)
    return False


def evaluate_condition(condition: RuleCondition, answers: Answers) -> bool:
    """
    Evaluate one authored top-level condition.

    The condition's own predicate is checked first; sub-conditions are only
    looked at when it holds.
    """
    return evaluate_node(compile_condition(condition), answers)


def evaluate_results(
    answers: Answers,
    results: Sequence[ResultDefinition]
) -> List[ResultDefinition]:
    """
    Return the results whose rules hold for the answers, in catalog order.

    Args:
        answers: question id -> answer value
        results: result definitions in catalog order

    Returns:
        Matching result definitions (the same objects, not copies)
    """
    matched = [r for r in results if evaluate_node(compile_result(r), answers)]
    logger.debug(
        f"Evaluated {len(results)} results against {len(answers)} answers: "
        f"{len(matched)} matched"
    )
    return matched


# ============================================================
# TRACE
# ============================================================

class ResultTrace(BaseModel):
    """Why a result did or did not match."""
    result_id: str
    matched: bool
    failed_question_id: Optional[str] = None
    failed_operator: Optional[str] = None
    expected: Optional[Any] = None
    actual: Optional[AnswerValue] = None


def _first_failure(node: ConditionNode, answers: Answers) -> Tuple[bool, Optional[Leaf]]:
    if isinstance(node, Leaf):
        ok = compare(node.operator, answers.get(node.question_id), node.value)
        return ok, None if ok else node

    if isinstance(node, AllOf):
        for child in node.nodes:
            ok, failed = _first_failure(child, answers)
            if not ok:
                return False, failed
        return True, None

    if isinstance(node, AnyOf):
        first_failed = None
        for child in node.nodes:
            ok, failed = _first_failure(child, answers)
            if ok:
                return True, None
            if first_failed is None:
                first_failed = failed
        return False, first_failed

    return False, None


def evaluate_with_trace(
    answers: Answers,
    results: Sequence[ResultDefinition]
) -> List[ResultTrace]:
    """Evaluate every result and report the first failing comparison."""
    traces = []
    for result in results:
        ok, failed = _first_failure(compile_result(result), answers)
        trace = ResultTrace(result_id=result.id, matched=ok)
        if failed is not None:
            expected = failed.value
            trace.failed_question_id = failed.question_id
            trace.failed_operator = failed.operator
            trace.expected = list(expected) if isinstance(expected, tuple) else expected
            trace.actual = answers.get(failed.question_id)
        traces.append(trace)
    return traces


def evaluation_hash(answers: Answers, matched: Sequence[ResultDefinition]) -> str:
    """
    Deterministic hash of an evaluation.

    Uses the answers and the matched result ids in output order.
    """
    return canonicalize_and_hash({
        "answers": dict(answers),
        "matched": [r.id for r in matched],
    })
