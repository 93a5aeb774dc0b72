import asyncio

import pytest
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from quizflow.app import app
from quizflow.db import Base, get_async_session
from quizflow.models import attempt_model, quiz_model  # noqa: F401  register tables
from quizflow.schemas.quiz_schema import QuizDefinition
from quizflow.schemas.submission_schema import SubmissionResult


def make_quiz(time_limit_seconds=None, **overrides) -> QuizDefinition:
    data = {
        "id": 7,
        "title": "Cell biology basics",
        "description": "Two quick questions",
        "time_limit_seconds": time_limit_seconds,
        "pass_threshold": 60,
        "questions": [
            {
                "id": 1,
                "type": "single_choice",
                "text": "Powerhouse of the cell?",
                "options": [{"id": 10, "text": "Mitochondria"}, {"id": 11, "text": "Ribosome"}],
                "points": 2,
            },
            {
                "id": 2,
                "type": "short_answer",
                "text": "Name the cell's control centre.",
                "points": 1,
            },
        ],
    }
    data.update(overrides)
    return QuizDefinition.model_validate(data)


class FakeQuizApi:
    """Catalog + grader double that records every call.

    load_errors / submit_errors are consumed one per call; gates hold a call open
    until the test sets them.
    """

    def __init__(self, quiz=None, result=None):
        self.quiz = quiz or make_quiz()
        self.result = result or SubmissionResult(score=85.0, passed=True)
        self.load_calls = []
        self.submit_calls = []
        self.load_errors = []
        self.submit_errors = []
        self.load_gate = None
        self.submit_gate = None

    async def get_quiz(self, quiz_id):
        self.load_calls.append(quiz_id)
        if self.load_gate is not None:
            await self.load_gate.wait()
        if self.load_errors:
            raise self.load_errors.pop(0)
        return self.quiz

    async def submit(self, quiz_id, payload):
        self.submit_calls.append((quiz_id, payload))
        if self.submit_gate is not None:
            await self.submit_gate.wait()
        if self.submit_errors:
            raise self.submit_errors.pop(0)
        return self.result


async def settle(rounds=5):
    """Let pending tasks on the loop run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def fake_api():
    return FakeQuizApi()


@pytest.fixture
def test_db(tmp_path):
    """Point the reference API at a fresh SQLite file for the duration of a test."""
    db_file = tmp_path / "quizflow_test.db"

    sync_engine = create_engine(f"sqlite:///{db_file}")
    Base.metadata.create_all(sync_engine)
    sync_engine.dispose()

    # NullPool: TestClient and pytest-asyncio run on different loops
    engine = create_async_engine(f"sqlite+aiosqlite:///{db_file}", poolclass=NullPool)
    maker = async_sessionmaker(engine, expire_on_commit=False)

    async def override_session():
        async with maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    yield engine
    app.dependency_overrides.clear()


SAMPLE_QUIZ = {
    "title": "Capitals",
    "description": "European capitals",
    "time_limit_seconds": 120,
    "pass_threshold": 50,
    "questions": [
        {
            "type": "single_choice",
            "text": "Capital of France?",
            "options": [{"id": "a", "text": "Paris"}, {"id": "b", "text": "Lyon"}],
            "correct_option_id": "a",
            "points": 3,
        },
        {
            "type": "true_false",
            "text": "Berlin is the capital of Germany.",
            "options": [{"id": "t", "text": "True"}, {"id": "f", "text": "False"}],
            "correct_option_id": "t",
            "points": 1,
        },
        {
            "type": "short_answer",
            "text": "Capital of Italy?",
            "accepted_answers": ["Rome", "Roma"],
            "points": 1,
        },
        {
            "type": "long_answer",
            "text": "Describe the history of Vienna.",
            "points": 5,
        },
    ],
}
