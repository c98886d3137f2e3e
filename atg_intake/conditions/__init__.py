"""
Condition Evaluation

Answers -> applicable strategy writeups.

This module answers: "Given what the client told us, which strategies apply?"

Rules are declarative: each result carries a list of conditions that must all
hold, each condition optionally carrying sub-conditions that are only checked
once the condition itself holds. Evaluation is pure and never raises on
answer data.

Version: conditions_v1
"""

from .models import (
    Answers,
    AnswerValue,
    Operator,
    RuleCondition,
    SubCondition,
    ResultDefinition,
    Leaf,
    AllOf,
    AnyOf,
    parse_match,
)
from .evaluate import (
    compare,
    compile_condition,
    compile_result,
    evaluate_condition,
    evaluate_node,
    evaluate_results,
    evaluate_with_trace,
    evaluation_hash,
    ResultTrace,
)

__all__ = [
    "Answers",
    "AnswerValue",
    "Operator",
    "RuleCondition",
    "SubCondition",
    "ResultDefinition",
    "Leaf",
    "AllOf",
    "AnyOf",
    "parse_match",
    "compare",
    "compile_condition",
    "compile_result",
    "evaluate_condition",
    "evaluate_node",
    "evaluate_results",
    "evaluate_with_trace",
    "evaluation_hash",
    "ResultTrace",
]

__version__ = "conditions_v1"
