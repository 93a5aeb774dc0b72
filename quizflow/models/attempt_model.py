from sqlalchemy import Boolean, Column, DateTime, Float, ForeignKey, Integer, JSON
from datetime import datetime, timezone

from ..db import Base


def _utcnow():
    return datetime.now(timezone.utc).replace(tzinfo=None)


class QuizAttemptDB(Base):
    """One graded submission."""
    __tablename__ = "quiz_attempts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    quiz_id = Column(Integer, ForeignKey("quizzes.id", ondelete="CASCADE"), nullable=False)
    score = Column(Float, nullable=False)
    passed = Column(Boolean, nullable=False)
    answers = Column(JSON, nullable=False, default=list)
    question_results = Column(JSON, nullable=True)
    submitted_at = Column(DateTime, default=_utcnow)
