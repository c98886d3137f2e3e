"""
Condition Models

Pydantic models for result rules as authored in the questionnaire document,
and the compiled condition tree the evaluator walks.

Authored shape (one entry of ResultDefinition.conditions):

    {"question_id": "q1-structure", "operator": "includes",
     "value": ["llc", "partnership"],
     "sub_conditions": [{"question_id": "q1-revenue",
                         "operator": "greaterThan", "value": 55000}]}

Compiled shape: Leaf | AllOf | AnyOf, evaluated recursively.

Version: conditions_v1
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field, field_validator


AnswerValue = Union[str, int, float]
Answers = Dict[str, AnswerValue]
ConditionValue = Union[List[str], str, int, float]


class Operator(str, Enum):
    """Operators understood by the rule language."""
    EQUALS = "equals"
    GREATER_THAN = "greaterThan"
    LESS_THAN = "lessThan"
    INCLUDES = "includes"
    AND = "and"
    OR = "or"


COMPARISON_OPERATORS = frozenset({
    Operator.EQUALS.value,
    Operator.GREATER_THAN.value,
    Operator.LESS_THAN.value,
    Operator.INCLUDES.value,
})

GROUP_OPERATORS = frozenset({Operator.AND.value, Operator.OR.value})


class SubCondition(BaseModel):
    """
    A comparison AND-ed under a top-level condition.

    Only checked once the parent condition's own predicate holds.
    """
    question_id: str
    operator: str = Field(
        description="equals, greaterThan, lessThan or includes"
    )
    value: ConditionValue


class RuleCondition(BaseModel):
    """
    One top-level condition of a result.

    Operator is kept as a plain string: an unrecognized operator is loadable
    and simply never matches.
    """
    question_id: str
    operator: str
    value: Optional[ConditionValue] = None
    sub_conditions: Optional[List[SubCondition]] = None


class ResultDefinition(BaseModel):
    """
    A strategy writeup and the rules that select it.

    All entries of `conditions` must hold. `match` is an optional native
    condition tree ({"all": [...]}, {"any": [...]} or a single comparison)
    AND-ed with `conditions`.
    """
    id: str
    title: str
    content: str = ""
    conditions: List[RuleCondition] = Field(default_factory=list)
    match: Optional[Dict[str, Any]] = None

    @field_validator("match")
    @classmethod
    def match_must_parse(cls, v: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
        if v is not None:
            parse_match(v)
        return v


# ============================================================
# COMPILED CONDITION TREE
# ============================================================

@dataclass(frozen=True)
class Leaf:
    """Compare one answer against a value."""
    question_id: str
    operator: str
    value: Any = None


@dataclass(frozen=True)
class AllOf:
    """True when every child is true (vacuously true when empty)."""
    nodes: Tuple["ConditionNode", ...] = ()


@dataclass(frozen=True)
class AnyOf:
    """True when at least one child is true (false when empty)."""
    nodes: Tuple["ConditionNode", ...] = ()


ConditionNode = Union[Leaf, AllOf, AnyOf]


def parse_match(data: Dict[str, Any]) -> ConditionNode:
    """
    Parse a native condition tree.

    Raises:
        ValueError: if the tree is malformed
    """
    if not isinstance(data, dict):
        raise ValueError(f"Condition node must be an object, got {type(data).__name__}")

    if "all" in data or "any" in data:
        if len(data) != 1:
            raise ValueError("Group node must have exactly one key: 'all' or 'any'")
        key = "all" if "all" in data else "any"
        children = data[key]
        if not isinstance(children, list):
            raise ValueError(f"'{key}' must be a list of condition nodes")
        nodes = tuple(parse_match(child) for child in children)
        return AllOf(nodes) if key == "all" else AnyOf(nodes)

    missing = [k for k in ("question_id", "operator", "value") if k not in data]
    if missing:
        raise ValueError(f"Leaf condition missing fields: {', '.join(missing)}")
    value = data["value"]
    if isinstance(value, list):
        value = tuple(value)
    return Leaf(
        question_id=str(data["question_id"]),
        operator=str(data["operator"]),
        value=value,
    )
