"""In-memory state of one quiz attempt. Nothing here is persisted."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Union
import enum

from ..schemas.quiz_schema import Question, QuestionType, QuizDefinition
from ..schemas.submission_schema import ChoiceAnswerEntry, SubmissionResult, TextAnswerEntry


class SessionPhase(str, enum.Enum):
    LOADING = "loading"
    IN_PROGRESS = "in_progress"
    SUBMITTING = "submitting"
    COMPLETED = "completed"
    LOAD_FAILED = "load_failed"
    SUBMIT_FAILED = "submit_failed"


class SubmitTrigger(str, enum.Enum):
    MANUAL = "manual"
    TIMEOUT = "timeout"


@dataclass(slots=True)
class ChoiceDraft:
    """Draft for single_choice / true_false questions."""

    selected_option_id: Optional[Union[int, str]] = None

    @property
    def answered(self) -> bool:
        return self.selected_option_id is not None

    def to_entry(self, question_id) -> ChoiceAnswerEntry:
        return ChoiceAnswerEntry(question_id=question_id, selected_option_id=self.selected_option_id)


@dataclass(slots=True)
class TextDraft:
    """Draft for short_answer / long_answer questions."""

    text: str = ""

    @property
    def answered(self) -> bool:
        return self.text != ""

    def to_entry(self, question_id) -> TextAnswerEntry:
        return TextAnswerEntry(question_id=question_id, text_response=self.text)


AnswerDraft = Union[ChoiceDraft, TextDraft]

_DRAFT_TYPES = {
    QuestionType.single_choice: ChoiceDraft,
    QuestionType.true_false: ChoiceDraft,
    QuestionType.short_answer: TextDraft,
    QuestionType.long_answer: TextDraft,
}


def draft_for(question: Question, value=None) -> AnswerDraft:
    """Build the draft variant matching the question type, holding value."""
    try:
        draft_cls = _DRAFT_TYPES[question.type]
    except KeyError:
        raise TypeError(f"No answer draft for question type {question.type!r}") from None
    if draft_cls is ChoiceDraft:
        return ChoiceDraft(selected_option_id=value)
    return TextDraft(text="" if value is None else str(value))


@dataclass(frozen=True, slots=True)
class SessionState:
    """Read-only snapshot handed to whatever renders the attempt."""

    phase: SessionPhase
    quiz: Optional[QuizDefinition] = None
    answers: Dict[Union[int, str], AnswerDraft] = field(default_factory=dict)
    remaining_seconds: Optional[int] = None
    result: Optional[SubmissionResult] = None
    trigger: Optional[SubmitTrigger] = None
    error: Optional[Exception] = None
