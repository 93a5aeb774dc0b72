"""
Quizzes and their questions, as stored by the reference Quiz API.

| Column | Type | Notes |
| :--- | :--- | :--- |
| `time_limit_seconds` | INTEGER | NULL = untimed |
| `pass_threshold` | FLOAT | 0-100 |
| `questions.position` | INTEGER | To maintain sequence in quiz |
| `questions.options` | JSON | `[{id, text}, ...]`, choice questions only |
| `questions.correct_option_id` | JSON | never served by GET /quizzes/{id} |
"""
from sqlalchemy import Boolean, Column, Float, ForeignKey, Integer, JSON, String, Enum
from sqlalchemy.orm import relationship

from ..db import Base


class QuizDB(Base):
    __tablename__ = "quizzes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    time_limit_seconds = Column(Integer, nullable=True)
    pass_threshold = Column(Float, nullable=False, default=60)
    is_published = Column(Boolean, default=True)

    questions = relationship(
        "QuizQuestionDB",
        back_populates="quiz",
        order_by="QuizQuestionDB.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class QuizQuestionDB(Base):
    __tablename__ = "quiz_questions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)
    text = Column(String, nullable=False, default="")
    type = Column(Enum('single_choice', 'true_false', 'short_answer', 'long_answer', name='question_type'),
                  nullable=False)
    options = Column(JSON, nullable=True)
    correct_option_id = Column(JSON, nullable=True)
    accepted_answers = Column(JSON, nullable=True)
    points = Column(Integer, default=1)

    quiz = relationship("QuizDB", back_populates="questions")
