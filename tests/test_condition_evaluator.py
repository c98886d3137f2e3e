"""
Result Evaluator Tests

Mandatory coverage:
- S-Corp and Augusta Rule scenarios against the packaged rules
- Type-sensitive equality, numeric-only comparisons, string-form membership
- "and"/"or" group conditions decided by their sub-conditions
- Unknown operators never match
- Catalog order, purity, determinism
- Native `match` trees, per-result trace, evaluation hash

Version: conditions_v1
"""

import copy

import pytest

from atg_intake.conditions import (
    AllOf,
    AnyOf,
    Leaf,
    ResultDefinition,
    RuleCondition,
    compare,
    compile_result,
    evaluate_condition,
    evaluate_results,
    evaluate_with_trace,
    evaluation_hash,
    parse_match,
)


def make_result(result_id="r1", conditions=None, match=None):
    return ResultDefinition(
        id=result_id,
        title=f"Result {result_id}",
        content="Body",
        conditions=conditions or [],
        match=match,
    )


def make_condition(question_id="q", operator="equals", value="yes", sub_conditions=None):
    return RuleCondition(
        question_id=question_id,
        operator=operator,
        value=value,
        sub_conditions=sub_conditions,
    )


SCORP_ANSWERS = {"q1-structure": "llc", "q1-accountant": "yes", "q1-revenue": 60000}


class TestPackagedRules:
    """Scenarios against the packaged questionnaire rules."""

    def test_scorp_included_above_threshold(self, questionnaire):
        """LLC with an accountant and revenue over 55k gets the S-Corp strategy."""
        matched = evaluate_results(SCORP_ANSWERS, questionnaire.results)
        assert [r.id for r in matched] == ["result-scorp-55k"]

    def test_scorp_excluded_below_threshold(self, questionnaire):
        answers = dict(SCORP_ANSWERS, **{"q1-revenue": 50000})
        matched = evaluate_results(answers, questionnaire.results)
        assert "result-scorp-55k" not in [r.id for r in matched]

    def test_scorp_excluded_for_string_revenue(self, questionnaire):
        """A numeric comparison against a string answer is false."""
        answers = dict(SCORP_ANSWERS, **{"q1-revenue": "60000"})
        matched = evaluate_results(answers, questionnaire.results)
        assert matched == []

    def test_scorp_partnership_and_float_revenue(self, questionnaire):
        answers = {"q1-structure": "partnership", "q1-accountant": "yes", "q1-revenue": 55000.5}
        matched = evaluate_results(answers, questionnaire.results)
        assert [r.id for r in matched] == ["result-scorp-55k"]

    def test_augusta_excluded_without_documentation(self, questionnaire):
        answers = {"q2-own-home": "yes", "q2-business-meetings": "yes", "q2-documentation": "no"}
        matched = evaluate_results(answers, questionnaire.results)
        assert "result-augusta-rule" not in [r.id for r in matched]

    def test_augusta_excluded_when_top_level_fails(self, questionnaire):
        matched = evaluate_results({"q2-own-home": "no"}, questionnaire.results)
        assert matched == []

    def test_augusta_included(self, questionnaire):
        answers = {"q2-own-home": "yes", "q2-business-meetings": "yes", "q2-documentation": "yes"}
        matched = evaluate_results(answers, questionnaire.results)
        assert [r.id for r in matched] == ["result-augusta-rule"]

    def test_results_in_catalog_order(self, questionnaire):
        """Matches keep catalog order regardless of answer order."""
        answers = {
            "q12-retirement-plans": "yes",
            "q12-solo-401k": "yes",
            "q10-business-travel": "yes",
            "q4-own-lease-vehicle": "yes",
            **SCORP_ANSWERS,
        }
        matched = evaluate_results(answers, questionnaire.results)
        assert [r.id for r in matched] == [
            "result-scorp-55k",
            "result-vehicle-deductions",
            "result-travel-meals",
            "result-solo-401k",
        ]

    def test_empty_answers_match_nothing(self, questionnaire):
        assert evaluate_results({}, questionnaire.results) == []

    def test_empty_catalog(self):
        assert evaluate_results(SCORP_ANSWERS, []) == []


class TestComparison:
    """Tests for single comparisons."""

    def test_equals_is_type_sensitive(self):
        assert compare("equals", 5, 5)
        assert compare("equals", 5.0, 5)
        assert not compare("equals", "5", 5)
        assert not compare("equals", 5, "5")

    def test_equals_missing_answer(self):
        assert not compare("equals", None, "yes")

    def test_numeric_operators_require_numbers(self):
        assert compare("greaterThan", 10, 5)
        assert not compare("greaterThan", 5, 5)
        assert compare("lessThan", 4.5, 5)
        assert not compare("lessThan", "4", 5)
        assert not compare("greaterThan", None, 5)
        assert not compare("greaterThan", True, 0)

    def test_includes_uses_string_form(self):
        assert compare("includes", "llc", ("llc", "partnership"))
        assert compare("includes", 5, ["5", "6"])
        assert compare("includes", 60000.0, ["60000"])
        assert not compare("includes", "s-corp", ("llc", "partnership"))

    def test_includes_missing_answer_never_member(self):
        assert not compare("includes", None, ["None", ""])

    def test_includes_non_list_value(self):
        assert not compare("includes", "llc", "llc")

    def test_unknown_operator_never_matches(self):
        assert not compare("notEquals", "yes", "no")
        assert not compare("and", "yes", "yes")


class TestConditions:
    """Tests for authored conditions and their sub-conditions."""

    def test_sub_conditions_all_required(self):
        condition = make_condition("a", sub_conditions=[
            {"question_id": "b", "operator": "equals", "value": "yes"},
            {"question_id": "c", "operator": "greaterThan", "value": 10},
        ])
        assert evaluate_condition(condition, {"a": "yes", "b": "yes", "c": 11})
        assert not evaluate_condition(condition, {"a": "yes", "b": "yes", "c": 10})
        assert not evaluate_condition(condition, {"a": "no", "b": "yes", "c": 11})

    def test_and_group_decided_by_sub_conditions(self):
        condition = make_condition("ignored", operator="and", value=None, sub_conditions=[
            {"question_id": "b", "operator": "equals", "value": "yes"},
            {"question_id": "c", "operator": "equals", "value": "yes"},
        ])
        assert evaluate_condition(condition, {"b": "yes", "c": "yes"})
        assert not evaluate_condition(condition, {"b": "yes", "c": "no"})

    def test_or_group_still_requires_every_sub_condition(self):
        """Legacy "or" groups AND their sub-conditions."""
        condition = make_condition("ignored", operator="or", value=None, sub_conditions=[
            {"question_id": "b", "operator": "equals", "value": "yes"},
            {"question_id": "c", "operator": "equals", "value": "yes"},
        ])
        assert not evaluate_condition(condition, {"b": "yes", "c": "no"})
        assert evaluate_condition(condition, {"b": "yes", "c": "yes"})

    def test_group_without_sub_conditions_holds(self):
        condition = make_condition("ignored", operator="and", value=None)
        assert evaluate_condition(condition, {})

    def test_group_operator_inside_sub_condition_is_false(self):
        condition = make_condition("a", sub_conditions=[
            {"question_id": "b", "operator": "and", "value": "yes"},
        ])
        assert not evaluate_condition(condition, {"a": "yes", "b": "yes"})

    def test_unknown_top_level_operator_excludes_result(self):
        result = make_result(conditions=[make_condition("a", operator="contains")])
        assert evaluate_results({"a": "yes"}, [result]) == []

    def test_result_without_conditions_always_matches(self):
        result = make_result()
        assert evaluate_results({}, [result]) == [result]


class TestMatchTree:
    """Tests for native condition trees."""

    def test_parse_groups_and_leaves(self):
        node = parse_match({"any": [
            {"question_id": "a", "operator": "equals", "value": "yes"},
            {"all": [{"question_id": "b", "operator": "includes", "value": ["x", "y"]}]},
        ]})
        assert isinstance(node, AnyOf)
        assert node.nodes[0] == Leaf("a", "equals", "yes")
        assert node.nodes[1] == AllOf((Leaf("b", "includes", ("x", "y")),))

    @pytest.mark.parametrize("data", [
        {"any": [], "all": []},
        {"any": "nope"},
        {"question_id": "a", "operator": "equals"},
        ["not", "a", "dict"],
    ])
    def test_parse_rejects_malformed(self, data):
        with pytest.raises(ValueError):
            parse_match(data)

    def test_malformed_match_rejected_by_model(self):
        with pytest.raises(ValueError):
            make_result(match={"any": "nope"})

    def test_any_of_gives_real_or(self):
        result = make_result(match={"any": [
            {"question_id": "a", "operator": "equals", "value": "yes"},
            {"question_id": "b", "operator": "equals", "value": "yes"},
        ]})
        assert evaluate_results({"a": "no", "b": "yes"}, [result]) == [result]
        assert evaluate_results({"a": "no", "b": "no"}, [result]) == []

    def test_match_is_anded_with_conditions(self):
        result = make_result(
            conditions=[make_condition("a")],
            match={"question_id": "b", "operator": "greaterThan", "value": 1},
        )
        assert evaluate_results({"a": "yes", "b": 2}, [result]) == [result]
        assert evaluate_results({"a": "no", "b": 2}, [result]) == []

    def test_empty_any_is_false(self):
        result = make_result(match={"any": []})
        assert evaluate_results({}, [result]) == []

    def test_compile_result_shape(self):
        result = make_result(conditions=[make_condition("a")])
        assert compile_result(result) == AllOf((Leaf("a", "equals", "yes"),))


class TestDeterminism:
    """Purity and determinism."""

    def test_answers_not_mutated(self, questionnaire):
        answers = dict(SCORP_ANSWERS)
        before = copy.deepcopy(answers)
        evaluate_results(answers, questionnaire.results)
        assert answers == before

    def test_repeat_evaluation_identical(self, questionnaire):
        first = evaluate_results(SCORP_ANSWERS, questionnaire.results)
        second = evaluate_results(SCORP_ANSWERS, questionnaire.results)
        assert [r.id for r in first] == [r.id for r in second]

    def test_returns_catalog_objects(self, results_by_id, questionnaire):
        matched = evaluate_results(SCORP_ANSWERS, questionnaire.results)
        assert matched[0] is results_by_id["result-scorp-55k"]

    def test_hash_stable_and_key_order_independent(self, questionnaire):
        matched = evaluate_results(SCORP_ANSWERS, questionnaire.results)
        reordered = dict(reversed(list(SCORP_ANSWERS.items())))
        h1 = evaluation_hash(SCORP_ANSWERS, matched)
        h2 = evaluation_hash(reordered, matched)
        assert h1 == h2
        assert h1.startswith("sha256:")
        assert len(h1) == len("sha256:") + 64

    def test_hash_treats_integral_float_as_int(self):
        assert evaluation_hash({"q": 60000.0}, []) == evaluation_hash({"q": 60000}, [])

    def test_hash_changes_with_answers(self):
        assert evaluation_hash({"q": "yes"}, []) != evaluation_hash({"q": "no"}, [])


class TestTrace:
    """Tests for the per-result explanation."""

    def test_trace_reports_first_failure(self, questionnaire):
        answers = dict(SCORP_ANSWERS, **{"q1-revenue": 50000})
        traces = {t.result_id: t for t in evaluate_with_trace(answers, questionnaire.results)}

        scorp = traces["result-scorp-55k"]
        assert scorp.matched is False
        assert scorp.failed_question_id == "q1-revenue"
        assert scorp.failed_operator == "greaterThan"
        assert scorp.expected == 55000
        assert scorp.actual == 50000

    def test_trace_list_value_and_missing_answer(self, questionnaire):
        traces = {t.result_id: t for t in evaluate_with_trace({}, questionnaire.results)}
        scorp = traces["result-scorp-55k"]
        assert scorp.expected == ["llc", "partnership"]
        assert scorp.actual is None

    def test_trace_matches_evaluation(self, questionnaire):
        traces = evaluate_with_trace(SCORP_ANSWERS, questionnaire.results)
        assert len(traces) == len(questionnaire.results)
        matched_ids = [t.result_id for t in traces if t.matched]
        assert matched_ids == [r.id for r in evaluate_results(SCORP_ANSWERS, questionnaire.results)]
        assert all(t.failed_question_id is None for t in traces if t.matched)


# Run tests
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
