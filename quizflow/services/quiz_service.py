from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models.quiz_model import QuizDB, QuizQuestionDB
from ..schemas.quiz_schema import QuizCreate


async def _get_quiz(session: AsyncSession, quiz_id: int, published_only: bool = True):
    stmt = select(QuizDB).where(QuizDB.id == quiz_id)
    if published_only:
        stmt = stmt.where(QuizDB.is_published == True)  # noqa: E712
    res = await session.execute(stmt)
    return res.scalar_one_or_none()


def _build_quiz(payload: QuizCreate) -> QuizDB:
    quiz = QuizDB(
        title=payload.title,
        description=payload.description,
        time_limit_seconds=payload.time_limit_seconds,
        pass_threshold=payload.pass_threshold,
        is_published=payload.is_published,
    )
    for idx, q in enumerate(payload.questions):
        quiz.questions.append(QuizQuestionDB(
            position=idx,
            text=q.text,
            type=q.type.value,
            options=[o.model_dump() for o in q.options] if q.options else None,
            correct_option_id=q.correct_option_id,
            accepted_answers=list(q.accepted_answers) or None,
            points=q.points,
        ))
    return quiz


def _sanitize_quiz(quiz: QuizDB) -> dict:
    # strip the answer key before a quiz leaves the server
    return {
        'id': quiz.id,
        'title': quiz.title,
        'description': quiz.description,
        'time_limit_seconds': quiz.time_limit_seconds,
        'pass_threshold': quiz.pass_threshold,
        'questions': [
            {
                'id': q.id,
                'type': q.type,
                'text': q.text,
                'options': q.options or [],
                'points': q.points,
            }
            for q in quiz.questions
        ],
    }
