import pytest

from quizcraft.core.models import (
    BlankItem,
    FillInBlanksQuestion,
    MultipleChoiceQuestion,
    Option,
    Quiz,
    SequenceItem,
    SequenceQuestion,
)
from quizcraft.core.remote_store import InMemoryRemoteStore, RemoteStoreError


@pytest.fixture
def multiple_choice_question():
    return MultipleChoiceQuestion(
        id="q-mc",
        text="Which of these are prime?",
        options=[
            Option(id="A", text="2", is_correct=True),
            Option(id="B", text="4"),
            Option(id="C", text="5", is_correct=True),
        ],
        is_multiple_answer=True,
    )


@pytest.fixture
def blanks_question():
    return FillInBlanksQuestion(
        id="q-blank",
        text="The capital of France is ____.",
        blanks=[BlankItem(id="b1", answer="Paris")],
    )


@pytest.fixture
def sequence_question():
    return SequenceQuestion(
        id="q-seq",
        text="Order the planets from the sun.",
        sequence_items=[
            SequenceItem(id="s1", text="Mercury", correct_position=1),
            SequenceItem(id="s2", text="Venus", correct_position=2),
            SequenceItem(id="s3", text="Earth", correct_position=3),
        ],
        pre_filled_positions=[2],
    )


@pytest.fixture
def sample_quiz(multiple_choice_question, blanks_question, sequence_question):
    return Quiz(
        id="quiz-1",
        title="General Knowledge",
        questions=[multiple_choice_question, blanks_question, sequence_question],
    )


class FailingRemoteStore:
    """Remote store whose every call fails, as when the backend is unreachable."""

    persistent = True

    def __init__(self):
        self.calls = []

    async def insert(self, table, records):
        self.calls.append(("insert", table))
        raise RemoteStoreError("backend unreachable")

    async def update(self, table, patch, record_id):
        self.calls.append(("update", table, record_id))
        raise RemoteStoreError("backend unreachable")

    async def select_all(self, table):
        self.calls.append(("select_all", table))
        raise RemoteStoreError("backend unreachable")

    async def aclose(self):
        pass


@pytest.fixture
def memory_store():
    return InMemoryRemoteStore()


@pytest.fixture
def failing_store():
    return FailingRemoteStore()
