"""Tests for draft editing, validation and saving."""

import pytest

from quizcraft.core.models import (
    FillInBlanksQuestion,
    MultipleChoiceQuestion,
    QuestionImage,
    QuestionType,
    SequenceItem,
    SequenceQuestion,
)
from quizcraft.core.quiz_authoring import DraftError, QuizDraft, save_draft, validate
from quizcraft.core.services.quiz_repository import QuizRepository, SyncStatus


def _valid_multiple_choice_draft():
    draft = QuizDraft(title="Capitals")
    question_id = draft.add_question(QuestionType.MULTIPLE_CHOICE)
    draft.update_question_text(question_id, "Capital of France?")
    right = draft.add_option(question_id)
    wrong = draft.add_option(question_id)
    draft.update_option(question_id, right, text="Paris", is_correct=True)
    draft.update_option(question_id, wrong, text="Lyon")
    return draft, question_id


def test_empty_draft_reports_title_and_question():
    errors = validate(QuizDraft(title=""))
    assert len(errors) >= 2
    assert any("title is required" in error.lower() for error in errors)
    assert any("at least one question is required" in error.lower() for error in errors)


def test_filled_multiple_choice_draft_is_valid():
    draft, _ = _valid_multiple_choice_draft()
    assert validate(draft) == []


def test_validate_does_not_change_the_draft():
    draft, _ = _valid_multiple_choice_draft()
    before = list(draft.questions)
    validate(draft)
    validate(draft)
    assert draft.questions == before


def test_add_question_builds_empty_variant_bodies():
    draft = QuizDraft(title="Mixed")
    mc = draft.get_question(draft.add_question(QuestionType.MULTIPLE_CHOICE))
    blanks = draft.get_question(draft.add_question(QuestionType.FILL_IN_BLANKS))
    sequence = draft.get_question(draft.add_question(QuestionType.SEQUENCE_ARRANGEMENT))

    assert isinstance(mc, MultipleChoiceQuestion) and mc.options == []
    assert isinstance(blanks, FillInBlanksQuestion) and blanks.blanks == []
    assert isinstance(sequence, SequenceQuestion)
    assert sequence.sequence_items == [] and sequence.pre_filled_positions == []


def test_single_answer_keeps_one_correct_option():
    draft = QuizDraft(title="Q")
    question_id = draft.add_question()
    first = draft.add_option(question_id)
    second = draft.add_option(question_id)
    draft.update_option(question_id, first, is_correct=True)
    draft.update_option(question_id, second, is_correct=True)

    options = draft.get_question(question_id).options
    assert [o.is_correct for o in options] == [False, True]


def test_multiple_answer_allows_several_correct_options():
    draft = QuizDraft(title="Q")
    question_id = draft.add_question()
    draft.set_multiple_answer(question_id, True)
    first = draft.add_option(question_id)
    second = draft.add_option(question_id)
    draft.update_option(question_id, first, is_correct=True)
    draft.update_option(question_id, second, is_correct=True)

    assert all(o.is_correct for o in draft.get_question(question_id).options)


def test_set_question_type_clears_other_variant_fields():
    draft = QuizDraft(title="Q")
    question_id = draft.add_question()
    draft.update_question_text(question_id, "Keep me")
    draft.set_code_snippet(question_id, "print('hi')")
    draft.add_option(question_id)

    draft.set_question_type(question_id, QuestionType.SEQUENCE_ARRANGEMENT)

    question = draft.get_question(question_id)
    assert isinstance(question, SequenceQuestion)
    assert question.id == question_id
    assert question.text == "Keep me"
    assert question.code_snippet == "print('hi')"
    assert not hasattr(question, "options")


def test_edits_do_not_alias_previous_question_values():
    draft = QuizDraft(title="Q")
    question_id = draft.add_question()
    option_id = draft.add_option(question_id)
    before = draft.get_question(question_id)

    draft.update_option(question_id, option_id, text="changed")

    assert before.options[0].text == ""
    assert draft.get_question(question_id).options[0].text == "changed"


def test_draft_from_quiz_is_a_deep_copy(sample_quiz):
    draft = QuizDraft.from_quiz(sample_quiz)
    draft.update_blank("q-blank", "b1", "Lyon")
    assert sample_quiz.find_question("q-blank").blanks[0].answer == "Paris"
    assert draft.is_editing


def test_blank_and_sequence_rules():
    draft = QuizDraft(title="Rules")
    blanks_id = draft.add_question(QuestionType.FILL_IN_BLANKS)
    draft.update_question_text(blanks_id, "Fill")
    sequence_id = draft.add_question(QuestionType.SEQUENCE_ARRANGEMENT)
    draft.update_question_text(sequence_id, "Order")

    errors = validate(draft)
    assert "Question 1 must have at least one blank to fill" in errors
    assert "Question 2 must have at least 2 sequence items" in errors

    blank_id = draft.add_blank(blanks_id)
    first = draft.add_sequence_item(sequence_id)
    second = draft.add_sequence_item(sequence_id)
    draft.update_sequence_item(sequence_id, first, text="One")
    draft.update_sequence_item(sequence_id, second, text="Two", correct_position=1)

    errors = validate(draft)
    assert "Question 1 has empty answers for blanks" in errors
    assert "Question 2 has duplicate positions in the sequence" in errors

    draft.update_blank(blanks_id, blank_id, "answer")
    draft.update_sequence_item(sequence_id, second, correct_position=2)
    assert validate(draft) == []


def test_new_sequence_items_take_the_next_position():
    draft = QuizDraft(title="Q")
    question_id = draft.add_question(QuestionType.SEQUENCE_ARRANGEMENT)
    draft.add_sequence_item(question_id)
    draft.add_sequence_item(question_id)
    positions = [i.correct_position for i in draft.get_question(question_id).sequence_items]
    assert positions == [1, 2]


def test_remove_operations(sample_quiz):
    draft = QuizDraft.from_quiz(sample_quiz)
    draft.remove_option("q-mc", "B")
    draft.remove_blank("q-blank", "b1")
    draft.remove_sequence_item("q-seq", "s3")
    draft.set_pre_filled_positions("q-seq", [1, 1, 2])
    draft.remove_question("q-mc")

    assert [q.id for q in draft.questions] == ["q-blank", "q-seq"]
    assert draft.get_question("q-blank").blanks == []
    assert [i.id for i in draft.get_question("q-seq").sequence_items] == ["s1", "s2"]
    assert draft.get_question("q-seq").pre_filled_positions == [1, 2]


def test_set_image_and_clear():
    draft = QuizDraft(title="Q")
    question_id = draft.add_question()
    draft.set_image(question_id, QuestionImage(data="http://img", name="a.png", path="a.png"))
    assert draft.get_question(question_id).image.name == "a.png"
    draft.set_image(question_id, None)
    assert draft.get_question(question_id).image is None


def test_unknown_ids_and_wrong_variants_raise():
    draft = QuizDraft(title="Q")
    question_id = draft.add_question()
    with pytest.raises(DraftError):
        draft.update_question_text("missing", "x")
    with pytest.raises(DraftError):
        draft.add_blank(question_id)
    with pytest.raises(DraftError):
        draft.update_option(question_id, "missing", text="x")


@pytest.mark.asyncio
async def test_save_is_a_no_op_when_invalid(memory_store):
    repository = QuizRepository(memory_store)
    outcome = await save_draft(QuizDraft(title=""), repository)
    assert not outcome.saved
    assert outcome.errors
    assert repository.list_quizzes() == []


@pytest.mark.asyncio
async def test_save_adds_then_updates(memory_store):
    repository = QuizRepository(memory_store)
    draft, question_id = _valid_multiple_choice_draft()

    created = await save_draft(draft, repository)
    assert created.saved
    assert created.result.status is SyncStatus.SYNCED
    assert draft.quiz_id == created.result.quiz.id

    draft.set_title("Capitals of Europe")
    updated = await save_draft(draft, repository)

    assert updated.saved
    assert repository.get_quiz_count() == 1
    assert repository.get_by_id(draft.quiz_id).title == "Capitals of Europe"


def _sequence_draft(count):
    draft = QuizDraft(title="Order")
    question_id = draft.add_question(QuestionType.SEQUENCE_ARRANGEMENT)
    draft.update_question_text(question_id, "Put these in order")
    item_ids = [draft.add_sequence_item(question_id) for _ in range(count)]
    for number, item_id in enumerate(item_ids, start=1):
        draft.update_sequence_item(question_id, item_id, text=f"Step {number}")
    return draft, question_id, item_ids


def test_removing_a_sequence_item_closes_the_gap():
    draft, question_id, item_ids = _sequence_draft(3)
    draft.set_pre_filled_positions(question_id, [1, 3])

    draft.remove_sequence_item(question_id, item_ids[0])

    question = draft.get_question(question_id)
    assert [i.correct_position for i in question.sequence_items] == [1, 2]
    assert question.pre_filled_positions == [2]
    assert validate(draft) == []


def test_correct_position_must_fit_the_item_count():
    draft, question_id, item_ids = _sequence_draft(2)

    with pytest.raises(DraftError, match="between 1 and 2"):
        draft.update_sequence_item(question_id, item_ids[0], correct_position=3)
    with pytest.raises(DraftError):
        draft.update_sequence_item(question_id, item_ids[0], correct_position=0)

    assert [i.correct_position for i in draft.get_question(question_id).sequence_items] == [1, 2]


def test_validate_flags_positions_that_cannot_be_chosen():
    draft = QuizDraft(
        title="Order",
        questions=[
            SequenceQuestion(
                id="q",
                text="Order",
                sequence_items=[
                    SequenceItem(id="a", text="A", correct_position=2),
                    SequenceItem(id="b", text="B", correct_position=3),
                ],
            )
        ],
    )

    assert validate(draft) == ["Question 1 has sequence positions outside 1 to 2"]
