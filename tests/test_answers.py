"""
Tests for answer ingestion.

Answer values are tagged once when the answer map is built; field names
are canonicalized at the same boundary.
"""

import pytest

from taskgen.answers import (
    AnswerKind,
    AnswerMap,
    ScalarBool,
    ScalarNumber,
    ScalarString,
    StringList,
    canonicalize,
    to_answer_value,
)


class TestCanonicalize:
    def test_lowercases_first_letter(self):
        assert canonicalize("HasKids") == "hasKids"

    def test_leaves_camel_case(self):
        assert canonicalize("moveDistance") == "moveDistance"

    def test_empty(self):
        assert canonicalize("") == ""


class TestTagging:
    def test_bool_before_number(self):
        """bool is a subclass of int; it must still be tagged BOOL."""
        assert to_answer_value(True) == ScalarBool(True)
        assert to_answer_value(True).kind is AnswerKind.BOOL

    def test_number(self):
        assert to_answer_value(3) == ScalarNumber(3)
        assert to_answer_value(2.5).kind is AnswerKind.NUMBER

    def test_string(self):
        assert to_answer_value("Rent") == ScalarString("Rent")

    def test_list(self):
        value = to_answer_value(["Yoga", "Gym"])
        assert value == StringList(("Yoga", "Gym"))
        assert value.kind is AnswerKind.STRING_LIST

    def test_list_elements_become_strings(self):
        assert to_answer_value([1, "a"]) == StringList(("1", "a"))

    @pytest.mark.parametrize("raw", [None, {"a": 1}, object()])
    def test_unsupported(self, raw):
        assert to_answer_value(raw) is None

    def test_values_are_immutable(self):
        value = ScalarString("Rent")
        with pytest.raises(AttributeError):
            value.value = "Own"


class TestAnswerMap:
    def test_from_raw_canonicalizes_keys(self):
        answers = AnswerMap.from_raw({"HasKids": True})
        assert list(answers) == ["hasKids"]

    def test_lookup_canonicalizes(self):
        answers = AnswerMap.from_raw({"hasKids": True})
        assert answers["HasKids"] == ScalarBool(True)
        assert "HasKids" in answers
        assert answers.get("HasKids") == ScalarBool(True)

    def test_drops_unsupported_values(self):
        answers = AnswerMap.from_raw({"a": None, "b": "x"})
        assert "a" not in answers
        assert len(answers) == 1

    def test_missing_key(self):
        answers = AnswerMap.from_raw({})
        assert answers.get("x") is None
        with pytest.raises(KeyError):
            answers["x"]

    def test_to_raw(self):
        raw = {"a": "x", "b": True, "c": 2, "d": ["p", "q"]}
        assert AnswerMap.from_raw(raw).to_raw() == raw

    def test_source_dict_changes_do_not_leak(self):
        raw = {"f": ["Yoga"]}
        answers = AnswerMap.from_raw(raw)
        raw["f"].append("Gym")
        assert answers["f"] == StringList(("Yoga",))

    def test_no_item_assignment(self):
        answers = AnswerMap.from_raw({"a": "x"})
        with pytest.raises(TypeError):
            answers["a"] = ScalarString("y")
