"""Tests for recording responses and judging them per question type."""

import pytest

from quizcraft.core.answer_tracking import AnswerSheet, is_answer_correct
from quizcraft.core.models import MultipleChoiceQuestion, Option, Quiz, UserAnswer


class TestMultipleChoice:
    def test_exact_correct_set_is_correct(self, sample_quiz, multiple_choice_question):
        sheet = AnswerSheet(sample_quiz)
        sheet.select_option("q-mc", "C")
        sheet.select_option("q-mc", "A")
        assert sheet.is_correct(multiple_choice_question)

    def test_subset_is_incorrect(self, sample_quiz, multiple_choice_question):
        sheet = AnswerSheet(sample_quiz)
        sheet.select_option("q-mc", "A")
        assert not sheet.is_correct(multiple_choice_question)

    def test_superset_is_incorrect(self, sample_quiz, multiple_choice_question):
        sheet = AnswerSheet(sample_quiz)
        for option_id in ("A", "B", "C"):
            sheet.select_option("q-mc", option_id)
        assert not sheet.is_correct(multiple_choice_question)

    def test_multiple_answer_toggles_membership(self, sample_quiz):
        sheet = AnswerSheet(sample_quiz)
        sheet.select_option("q-mc", "A")
        sheet.select_option("q-mc", "B")
        sheet.select_option("q-mc", "A")
        assert sheet.answer_for("q-mc").selected_option_ids == ["B"]
        assert sheet.is_option_selected("q-mc", "B")
        assert not sheet.is_option_selected("q-mc", "A")

    def test_single_answer_replaces_selection(self):
        question = MultipleChoiceQuestion(
            id="q",
            text="Pick one",
            options=[Option(id="x", text="x", is_correct=True), Option(id="y", text="y")],
        )
        sheet = AnswerSheet(Quiz(id="z", title="Z", questions=[question]))
        sheet.select_option("q", "y")
        sheet.select_option("q", "x")
        assert sheet.answer_for("q").selected_option_ids == ["x"]
        assert sheet.is_correct(question)

    def test_unanswered_question_is_incorrect(self, sample_quiz, multiple_choice_question):
        assert not AnswerSheet(sample_quiz).is_correct(multiple_choice_question)

    def test_unknown_option_is_rejected(self, sample_quiz):
        with pytest.raises(KeyError):
            AnswerSheet(sample_quiz).select_option("q-mc", "missing")


class TestFillInBlanks:
    @pytest.mark.parametrize("value", ["paris", " Paris ", "PARIS"])
    def test_case_and_whitespace_are_ignored(self, sample_quiz, blanks_question, value):
        sheet = AnswerSheet(sample_quiz)
        sheet.set_blank_answer("q-blank", "b1", value)
        assert sheet.is_correct(blanks_question)

    def test_misspelling_is_incorrect(self, sample_quiz, blanks_question):
        sheet = AnswerSheet(sample_quiz)
        sheet.set_blank_answer("q-blank", "b1", "Pariss")
        assert not sheet.is_correct(blanks_question)

    def test_wrong_question_type_is_rejected(self, sample_quiz):
        with pytest.raises(ValueError):
            AnswerSheet(sample_quiz).set_blank_answer("q-mc", "b1", "Paris")


class TestSequence:
    def test_pre_filled_item_counts_without_input(self, sample_quiz, sequence_question):
        sheet = AnswerSheet(sample_quiz)
        sheet.set_sequence_position("q-seq", "s1", 1)
        sheet.set_sequence_position("q-seq", "s3", 3)
        assert sheet.is_correct(sequence_question)

    def test_pre_filled_item_ignores_wrong_input(self, sample_quiz, sequence_question):
        sheet = AnswerSheet(sample_quiz)
        sheet.set_sequence_position("q-seq", "s1", 1)
        sheet.set_sequence_position("q-seq", "s2", 3)
        sheet.set_sequence_position("q-seq", "s3", 3)
        assert sheet.is_correct(sequence_question)

    def test_unanswered_sentinel_is_incorrect(self, sample_quiz, sequence_question):
        sheet = AnswerSheet(sample_quiz)
        sheet.set_sequence_position("q-seq", "s1", 1)
        sheet.set_sequence_position("q-seq", "s3", 0)
        assert not sheet.is_correct(sequence_question)

    def test_shared_position_scores_at_most_one(self, sample_quiz, sequence_question):
        sheet = AnswerSheet(sample_quiz)
        sheet.set_sequence_position("q-seq", "s1", 3)
        sheet.set_sequence_position("q-seq", "s3", 3)
        assert not sheet.is_correct(sequence_question)

    def test_used_positions_are_flagged(self, sample_quiz):
        sheet = AnswerSheet(sample_quiz)
        sheet.set_sequence_position("q-seq", "s1", 3)
        assert sheet.used_positions("q-seq", exclude_item_id="s3") == {3}
        assert sheet.used_positions("q-seq", exclude_item_id="s1") == set()
        assert sheet.position_choices("q-seq", "s3") == [(1, False), (2, False), (3, True)]

    def test_out_of_range_position_is_rejected(self, sample_quiz):
        with pytest.raises(ValueError):
            AnswerSheet(sample_quiz).set_sequence_position("q-seq", "s1", 4)


def test_is_answer_correct_treats_missing_answer_as_empty(blanks_question):
    assert not is_answer_correct(blanks_question, None)
    assert is_answer_correct(
        blanks_question, UserAnswer(question_id="q-blank", blank_answers={"b1": "paris"})
    )
