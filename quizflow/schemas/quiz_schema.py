from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import List, Optional, Union
import enum

# Ids are opaque to the engine; the reference API hands out integers
QuizId = Union[int, str]
QuestionId = Union[int, str]
OptionId = Union[int, str]


class QuestionType(str, enum.Enum):
    """Enums for valid question types."""
    single_choice = "single_choice"
    true_false = "true_false"
    short_answer = "short_answer"
    long_answer = "long_answer"


CHOICE_TYPES = (QuestionType.single_choice, QuestionType.true_false)
TEXT_TYPES = (QuestionType.short_answer, QuestionType.long_answer)

# older catalog payloads label single choice questions this way
_TYPE_ALIASES = {"multiple_choice": QuestionType.single_choice.value}


class Option(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: OptionId
    text: str = ""


class QuestionData(BaseModel):
    """
    Shape shared by every question payload.

    Choice questions (single_choice, true_false) must carry at least one option and
    option ids must be unique inside the question. Text questions carry no options.
    """
    model_config = ConfigDict(frozen=True)

    type: QuestionType = Field(..., description="How an answer is captured for this question.")
    text: str = Field("", description="The question prompt.")
    options: List[Option] = Field(default_factory=list,
                                  description="Ordered answer options for choice questions.")
    points: int = Field(1, gt=0, description="Weight of the question; scoring is up to the grader.")

    @field_validator("type", mode="before")
    @classmethod
    def normalize_type(cls, v):
        if isinstance(v, str):
            return _TYPE_ALIASES.get(v, v)
        return v

    @model_validator(mode="after")
    def validate_options_based_on_type(self):
        if self.type in CHOICE_TYPES:
            if not self.options:
                raise ValueError(f"{self.type.value} question needs at least one option")
            ids = [o.id for o in self.options]
            if len(set(ids)) != len(ids):
                raise ValueError("Option ids must be unique within a question")
        elif self.options:
            raise ValueError(f"{self.type.value} question must not have options")
        return self

    @property
    def is_choice(self) -> bool:
        return self.type in CHOICE_TYPES

    def has_option(self, option_id) -> bool:
        return any(o.id == option_id for o in self.options)


class Question(QuestionData):
    id: QuestionId


class QuizDefinition(BaseModel):
    """A quiz as served by the catalog. Immutable once loaded."""
    model_config = ConfigDict(frozen=True)

    id: QuizId
    title: str = ""
    description: Optional[str] = None
    time_limit_seconds: Optional[int] = Field(None, ge=0)
    pass_threshold: float = Field(0, ge=0, le=100)
    questions: List[Question] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def minutes_to_seconds(cls, data):
        # catalogs that only know time_limit_minutes still get a countdown
        if isinstance(data, dict) and data.get("time_limit_seconds") is None:
            minutes = data.get("time_limit_minutes")
            if minutes is not None:
                data = {**data, "time_limit_seconds": int(round(float(minutes) * 60))}
        return data

    @field_validator("questions")
    @classmethod
    def question_ids_unique(cls, v):
        ids = [q.id for q in v]
        if len(set(ids)) != len(ids):
            raise ValueError("Question ids must be unique within a quiz")
        return v

    @property
    def is_timed(self) -> bool:
        return self.time_limit_seconds is not None

    def get_question(self, question_id) -> Optional[Question]:
        for q in self.questions:
            if q.id == question_id:
                return q
        return None


class QuestionCreate(QuestionData):
    """Question as sent to the reference API, including what the grader needs."""
    correct_option_id: Optional[OptionId] = None
    # accepted responses for short/long answers; matched case-insensitively
    accepted_answers: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_answer_key(self):
        if self.is_choice:
            if self.correct_option_id is None:
                raise ValueError("Choice questions need a correct_option_id")
            if not self.has_option(self.correct_option_id):
                raise ValueError("correct_option_id must be one of the question's options")
        elif self.correct_option_id is not None:
            raise ValueError("Text questions cannot have a correct_option_id")
        return self


class QuizCreate(BaseModel):
    title: str
    description: Optional[str] = None
    time_limit_seconds: Optional[int] = Field(None, ge=0)
    pass_threshold: float = Field(60, ge=0, le=100)
    is_published: bool = True
    # the order in the list defines the quiz order
    questions: List[QuestionCreate] = Field(default_factory=list)
