"""Tests for catalog models."""

import pytest

from brainbites.catalog import PresentedQuestion, Question, category_prefix


def make_row(**overrides) -> dict:
    row = {
        "id": "M1",
        "category": "math",
        "question": "What is 2 + 2?",
        "optionA": "3",
        "optionB": "4",
        "optionC": "5",
        "optionD": "22",
        "correctAnswer": "B",
        "explanation": "Two plus two is four.",
    }
    row.update(overrides)
    return row


class TestQuestionFromRow:
    def test_tabular_row(self):
        question = Question.from_row(make_row())
        assert question.id == "M1"
        assert question.category == "math"
        assert question.prompt == "What is 2 + 2?"
        assert question.options == {"A": "3", "B": "4", "C": "5", "D": "22"}
        assert question.correct_key == "B"
        assert question.explanation == "Two plus two is four."

    def test_nested_options(self):
        row = {
            "id": "S9",
            "category": "science",
            "question": "Water freezes at?",
            "options": {"a": "0 C", "b": "10 C"},
            "correctAnswer": "a",
        }
        question = Question.from_row(row)
        assert question.options == {"A": "0 C", "B": "10 C"}
        assert question.correct_key == "A"

    def test_values_are_trimmed_and_normalized(self):
        question = Question.from_row(make_row(id=" M2 ", category=" Math ", correctAnswer=" b "))
        assert question.id == "M2"
        assert question.category == "math"
        assert question.correct_key == "B"

    def test_blank_options_dropped(self):
        question = Question.from_row(make_row(optionC="", optionD="  "))
        assert list(question.options) == ["A", "B"]

    def test_missing_explanation_is_empty(self):
        row = make_row()
        del row["explanation"]
        assert Question.from_row(row).explanation == ""


class TestQuestionValidation:
    def test_requires_id(self):
        with pytest.raises(ValueError, match="id"):
            Question.from_row(make_row(id=""))

    def test_requires_prompt(self):
        with pytest.raises(ValueError, match="prompt"):
            Question.from_row(make_row(question=""))

    def test_requires_two_options(self):
        with pytest.raises(ValueError, match="two options"):
            Question.from_row(make_row(optionA="", optionC="", optionD=""))

    def test_correct_key_must_be_an_option(self):
        with pytest.raises(ValueError, match="correct key"):
            Question.from_row(make_row(correctAnswer="E"))

    def test_correct_key_must_not_point_at_blank_option(self):
        with pytest.raises(ValueError):
            Question.from_row(make_row(optionD="", correctAnswer="D"))


class TestPresentation:
    def test_present(self):
        presented = Question.from_row(make_row()).present()
        assert isinstance(presented, PresentedQuestion)
        assert presented.question == "What is 2 + 2?"
        assert presented.correct_answer == "B"
        assert presented.is_fallback is False

    def test_to_dict_shape(self):
        data = Question.from_row(make_row()).present().to_dict()
        assert data == {
            "id": "M1",
            "question": "What is 2 + 2?",
            "options": {"A": "3", "B": "4", "C": "5", "D": "22"},
            "correctAnswer": "B",
            "explanation": "Two plus two is four.",
        }

    def test_presented_options_are_a_copy(self):
        question = Question.from_row(make_row())
        question.present().options["A"] = "changed"
        assert question.options["A"] == "3"


@pytest.mark.parametrize(
    "category,prefix",
    [("math", "M"), ("history", "H"), ("funfacts", "F"), ("", "")],
)
def test_category_prefix(category: str, prefix: str):
    assert category_prefix(category) == prefix
