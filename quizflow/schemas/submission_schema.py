from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional, Union
from datetime import datetime

from .quiz_schema import OptionId, QuestionId, QuizId


class ChoiceAnswerEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    question_id: QuestionId
    selected_option_id: Optional[OptionId] = None


class TextAnswerEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    question_id: QuestionId
    text_response: str = Field(..., description="Empty string when the question was left unanswered.")


AnswerEntry = Union[ChoiceAnswerEntry, TextAnswerEntry]


class SubmissionPayload(BaseModel):
    quiz_id: QuizId
    # one entry per question, in quiz order
    answers: List[AnswerEntry] = Field(default_factory=list)


class SubmissionResult(BaseModel):
    """Grader verdict. score is authoritative; the engine never recomputes it."""
    model_config = ConfigDict(frozen=True)

    score: float = Field(..., ge=0, le=100)
    passed: bool
    correct_answers: Optional[int] = None
    total_questions: Optional[int] = None
    # question id (as string) -> correct?; None for answers the grader could not judge
    question_results: Optional[Dict[str, Optional[bool]]] = None


class AttemptRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    quiz_id: int
    score: float
    passed: bool
    answers: List[dict]
    question_results: Optional[Dict[str, Optional[bool]]] = None
    submitted_at: datetime
