"""
Tests for the condition evaluator.

These tests verify:
    - Unconditional specs always match
    - Missing answers fail their field
    - Multi-select OR semantics
    - Numeric comparators, boolean literals, string fallback
    - AND across fields
    - Malformed clause policy
    - Evaluation traces
"""

import logging

import pytest

from taskgen.answers import AnswerMap, ScalarBool, ScalarNumber, ScalarString
from taskgen.conditions import ConditionSpec
from taskgen.evaluator import (
    MalformedConditionPolicy,
    evaluate,
    evaluate_with_trace,
    explain,
    match_token,
    parse_decimal,
)


class TestUnconditional:
    """Empty or absent specs always match."""

    @pytest.mark.parametrize("answers", [{}, {"hasKids": True}, {"f": ["X"], "n": 3}])
    def test_empty_spec_matches_any_answers(self, answers):
        assert evaluate({}, answers) is True

    def test_none_spec_matches(self):
        assert evaluate(None, {}) is True

    def test_unconditional_has_no_trace(self):
        outcome = evaluate_with_trace(ConditionSpec.unconditional(), {"a": "X"})
        assert outcome.matched
        assert outcome.trace == ()


class TestMissingField:
    def test_absent_field_fails(self):
        assert evaluate({"hasKids": ["true"]}, {}) is False

    def test_any_absent_field_fails_whole_spec(self):
        spec = {"a": ["X"], "b": ["Y"]}
        assert evaluate(spec, {"a": "X"}) is False

    def test_unsupported_value_treated_as_absent(self):
        """None values are dropped at ingestion."""
        assert evaluate({"hasKids": ["true"]}, {"hasKids": None}) is False

    def test_missing_reason_in_trace(self):
        outcome = evaluate_with_trace({"hasKids": ["true"]}, {})
        assert outcome.trace[0].reason == "missing"
        assert outcome.failed_fields() == ["hasKids"]


class TestMultiSelect:
    def test_any_selection_matches(self):
        assert evaluate({"f": ["X"]}, {"f": ["Y", "X"]}) is True

    def test_no_selection_matches(self):
        assert evaluate({"f": ["X"]}, {"f": ["Y", "Z"]}) is False

    def test_case_insensitive(self):
        assert evaluate({"fitnessWellness": ["yoga"]}, {"fitnessWellness": ["Gym", "YOGA"]}) is True

    def test_any_token_matches(self):
        spec = {"financialInstitutions": ["Bank Account", "Credit Union"]}
        assert evaluate(spec, {"financialInstitutions": ["Credit Union"]}) is True

    def test_empty_selection_fails(self):
        assert evaluate({"f": ["X"]}, {"f": []}) is False

    def test_no_numeric_interpretation(self):
        """Comparator tokens are plain strings for multi-select answers."""
        assert evaluate({"f": [">=1"]}, {"f": ["2"]}) is False
        assert evaluate({"f": [">=1"]}, {"f": [">=1"]}) is True

    def test_no_boolean_interpretation(self):
        assert evaluate({"f": ["true"]}, {"f": ["TRUE"]}) is True
        assert evaluate({"f": ["yes"]}, {"f": ["true"]}) is False


class TestNumericComparators:
    def test_greater_equal(self):
        assert evaluate({"f": [">=1"]}, {"f": 0}) is False
        assert evaluate({"f": [">=1"]}, {"f": 1}) is True
        assert evaluate({"f": [">=1"]}, {"f": 2}) is True

    def test_less_equal(self):
        assert evaluate({"f": ["<=5"]}, {"f": 5}) is True
        assert evaluate({"f": ["<=5"]}, {"f": 6}) is False

    def test_strict_greater(self):
        assert evaluate({"f": [">0"]}, {"f": 0}) is False
        assert evaluate({"f": [">0"]}, {"f": 0.5}) is True

    def test_strict_less(self):
        assert evaluate({"f": ["<10"]}, {"f": 10}) is False
        assert evaluate({"f": ["<10"]}, {"f": 9}) is True

    def test_numeric_string_answer(self):
        assert evaluate({"schoolAgeChildren": [">=1"]}, {"schoolAgeChildren": "2"}) is True

    def test_fractional_threshold(self):
        assert evaluate({"f": [">=1.5"]}, {"f": 1.5}) is True
        assert evaluate({"f": [">=1.5"]}, {"f": 1.4}) is False

    def test_whitespace_after_prefix(self):
        assert evaluate({"f": [">= 1"]}, {"f": 1}) is True

    def test_non_numeric_answer_does_not_match(self):
        assert evaluate({"f": [">=1"]}, {"f": "many"}) is False

    def test_bad_threshold_does_not_match(self):
        assert evaluate({"f": [">=abc"]}, {"f": 5}) is False

    @pytest.mark.parametrize("answer", ["infinity", "inf", "nan", "1_000", "1e3", float("inf"), float("nan")])
    def test_only_finite_decimals_compare(self, answer):
        assert evaluate({"f": [">=1"]}, {"f": answer}) is False

    @pytest.mark.parametrize("token", [">=-inf", "<nan", ">1_0"])
    def test_non_decimal_threshold_does_not_match(self, token):
        assert evaluate({"f": [token]}, {"f": 5}) is False

    @pytest.mark.parametrize("text, expected", [
        ("2", 2.0), (" -1.5 ", -1.5), (".5", 0.5), ("3.", 3.0),
        ("inf", None), ("1_000", None), ("1e3", None), ("", None),
    ])
    def test_parse_decimal(self, text, expected):
        assert parse_decimal(text) == expected

    def test_boolean_is_not_a_number(self):
        assert evaluate({"f": [">=1"]}, {"f": True}) is False

    def test_falls_through_to_next_token(self):
        assert evaluate({"f": [">=10", "3"]}, {"f": 3}) is True


class TestBooleans:
    def test_true_token_matches_bool(self):
        assert evaluate({"f": ["true"]}, {"f": True}) is True

    def test_true_token_matches_string(self):
        assert evaluate({"f": ["true"]}, {"f": "true"}) is True
        assert evaluate({"f": ["TRUE"]}, {"f": "True"}) is True

    def test_true_token_rejects_false(self):
        assert evaluate({"f": ["true"]}, {"f": False}) is False

    def test_false_token(self):
        assert evaluate({"f": ["false"]}, {"f": False}) is True
        assert evaluate({"f": ["false"]}, {"f": "false"}) is True
        assert evaluate({"f": ["false"]}, {"f": True}) is False

    def test_boolean_token_rejects_numbers(self):
        assert evaluate({"f": ["true"]}, {"f": 1}) is False

    def test_yes_no_vocabulary_for_bools(self):
        assert evaluate({"anyPets": ["Yes"]}, {"anyPets": True}) is True
        assert evaluate({"anyPets": ["No"]}, {"anyPets": False}) is True
        assert evaluate({"anyPets": ["Yes"]}, {"anyPets": False}) is False


class TestStringFallback:
    def test_case_insensitive_equality(self):
        assert evaluate({"moveDistance": ["long distance"]}, {"moveDistance": "Long Distance"}) is True

    def test_mismatch(self):
        assert evaluate({"moveDistance": ["Local"]}, {"moveDistance": "Long Distance"}) is False

    def test_or_across_tokens(self):
        spec = {"newDwellingType": ["Apartment", "Condo"]}
        assert evaluate(spec, {"newDwellingType": "Condo"}) is True
        assert evaluate(spec, {"newDwellingType": "House"}) is False

    def test_number_string_form(self):
        assert evaluate({"f": ["2"]}, {"f": 2}) is True
        assert evaluate({"f": ["2"]}, {"f": 2.0}) is True
        assert evaluate({"f": ["2.5"]}, {"f": 2.5}) is True


class TestAndAcrossFields:
    def test_one_field_fails(self):
        assert evaluate({"a": ["X"], "b": ["Y"]}, {"a": "X", "b": "Z"}) is False

    def test_all_fields_match(self):
        assert evaluate({"a": ["X"], "b": ["Y"]}, {"a": "X", "b": "Y"}) is True

    def test_trace_stops_at_first_failure(self):
        outcome = evaluate_with_trace({"a": ["Q"], "b": ["Y"]}, {"a": "X", "b": "Y"})
        assert not outcome.matched
        assert [t.field for t in outcome.trace] == ["a"]


class TestCanonicalization:
    def test_capitalized_condition_field(self):
        assert evaluate({"HasKids": ["true"]}, {"hasKids": True}) is True

    def test_capitalized_answer_key(self):
        assert evaluate({"hasKids": ["true"]}, {"HasKids": True}) is True

    def test_only_first_letter_normalized(self):
        assert evaluate({"haskids": ["true"]}, {"hasKids": True}) is False


class TestMalformedConditions:
    def test_scalar_value_is_skipped_by_default(self):
        spec = {"hasKids": "true", "anyPets": ["Yes"]}
        assert evaluate(spec, {"anyPets": "Yes"}) is True

    def test_skip_widens_eligibility_even_when_answer_disagrees(self):
        assert evaluate({"hasKids": "true"}, {"hasKids": False}) is True

    def test_empty_token_list_is_malformed(self):
        assert evaluate({"hasKids": []}, {}) is True

    def test_non_string_tokens_are_malformed(self):
        assert evaluate({"schoolAgeChildren": [1]}, {}) is True

    def test_fail_closed_policy(self):
        spec = {"hasKids": "true"}
        assert evaluate(spec, {"hasKids": True}, MalformedConditionPolicy.FAIL_CLOSED) is False

    def test_skip_is_logged_and_traced(self, caplog):
        with caplog.at_level(logging.WARNING, logger="taskgen.evaluator"):
            outcome = evaluate_with_trace({"hasKids": "true"}, {})
        assert outcome.matched
        assert outcome.trace[0].reason == "malformed-skipped"
        assert "Malformed condition" in caplog.text

    def test_fail_closed_trace_reason(self):
        outcome = evaluate_with_trace({"hasKids": 1}, {}, MalformedConditionPolicy.FAIL_CLOSED)
        assert outcome.trace[0].reason == "malformed-failed"


class TestTrace:
    def test_trace_records_values(self):
        outcome = evaluate_with_trace(
            {"moveDistance": ["Local", "Long Distance"], "fitnessWellness": ["Yoga"]},
            {"moveDistance": "Local", "fitnessWellness": ["Yoga", "Gym"]},
        )
        assert outcome.matched
        first, second = outcome.trace
        assert first.field == "moveDistance"
        assert first.user_value == "Local"
        assert first.required_tokens == ("Local", "Long Distance")
        assert first.reason == "matched"
        assert second.user_value == ["Yoga", "Gym"]

    def test_outcome_is_truthy(self):
        assert evaluate_with_trace({}, {})
        assert not evaluate_with_trace({"a": ["X"]}, {})

    def test_explain(self):
        detail = explain(evaluate_with_trace({"a": ["X"]}, {"a": "Y"}))
        assert detail == {
            "matched": False,
            "fields": [
                {"field": "a", "user_value": "Y", "required": ["X"], "matched": False, "reason": "no-match"}
            ],
        }


class TestPurity:
    def test_inputs_unchanged(self):
        spec = {"a": ["X"], "b": [">=1"]}
        answers = {"a": "X", "b": 2, "c": ["Y"]}
        evaluate(spec, answers)
        assert spec == {"a": ["X"], "b": [">=1"]}
        assert answers == {"a": "X", "b": 2, "c": ["Y"]}

    def test_repeatable(self):
        answers = AnswerMap.from_raw({"a": "X"})
        spec = ConditionSpec.from_mapping({"a": ["X"]})
        assert [evaluate(spec, answers) for _ in range(3)] == [True, True, True]


def test_match_token_direct():
    assert match_token(ScalarNumber(3), ">2")
    assert match_token(ScalarBool(True), "yes")
    assert match_token(ScalarString("Rent"), "rent")
    assert not match_token(ScalarString("Rent"), "Own")
