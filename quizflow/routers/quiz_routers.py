from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError
import logging

from ..db import get_async_session
from ..models.attempt_model import QuizAttemptDB
from ..schemas.quiz_schema import CHOICE_TYPES, QuizCreate, QuizDefinition
from ..schemas.submission_schema import AttemptRead, ChoiceAnswerEntry, SubmissionPayload, SubmissionResult
from ..services.grading_service import answers_by_question, grade_submission, score_percentage
from ..services.quiz_service import _build_quiz, _get_quiz, _sanitize_quiz

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/quizzes", tags=["Quizzes"])


@router.post("", response_model=QuizDefinition, status_code=status.HTTP_201_CREATED)
async def create_quiz(payload: QuizCreate, session: AsyncSession = Depends(get_async_session)):
    quiz = _build_quiz(payload)
    session.add(quiz)
    try:
        await session.commit()
    except IntegrityError as ie:
        await session.rollback()
        logger.exception("DB IntegrityError while creating quiz %r: %s", payload.title, ie)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Database error while creating quiz")
    logger.info("Created quiz %s with %d questions", quiz.id, len(quiz.questions))
    return _sanitize_quiz(quiz)


@router.get("/{quiz_id}", response_model=QuizDefinition)
async def get_quiz(quiz_id: int, session: AsyncSession = Depends(get_async_session)):
    quiz = await _get_quiz(session, quiz_id)
    if not quiz:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    return _sanitize_quiz(quiz)


@router.post("/{quiz_id}/submit", response_model=SubmissionResult)
async def submit_quiz(quiz_id: int, payload: SubmissionPayload, session: AsyncSession = Depends(get_async_session)):
    try:
        if str(payload.quiz_id) != str(quiz_id):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="quiz_id in body does not match the URL")

        quiz = await _get_quiz(session, quiz_id)
        if not quiz:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")

        types = {str(q.id): q.type for q in quiz.questions}
        seen = set()
        for entry in payload.answers:
            qid = str(entry.question_id)
            if qid not in types:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Unknown question id: {qid}")
            if qid in seen:
                raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Question {qid} answered more than once")
            seen.add(qid)
            # a text response for a choice question would otherwise be compared as an option id
            is_choice = isinstance(entry, ChoiceAnswerEntry)
            if is_choice != (types[qid] in CHOICE_TYPES):
                raise HTTPException(
                    status_code=status.HTTP_400_BAD_REQUEST,
                    detail=f"Answer for question {qid} does not fit its type {types[qid]}",
                )

        answers = answers_by_question(payload)
        question_results, earned, total = grade_submission(answers, quiz.questions)
        score = score_percentage(earned, total)
        passed = score >= quiz.pass_threshold

        attempt = QuizAttemptDB(
            quiz_id=quiz.id,
            score=score,
            passed=passed,
            answers=[entry.model_dump(mode="json") for entry in payload.answers],
            question_results=question_results,
        )
        try:
            session.add(attempt)
            await session.commit()
        except IntegrityError as ie:
            await session.rollback()
            logger.exception("DB IntegrityError while storing attempt for quiz_id=%s: %s", quiz_id, ie)
            raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Database error while submitting quiz")

        logger.info("Graded attempt %s for quiz %s: score=%s passed=%s", attempt.id, quiz_id, score, passed)
        return {
            'score': score,
            'passed': passed,
            'correct_answers': sum(1 for r in question_results.values() if r),
            'total_questions': len(quiz.questions),
            'question_results': question_results,
        }
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Error while submitting quiz_id=%s: %s", quiz_id, e)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))


@router.get("/{quiz_id}/attempts", response_model=List[AttemptRead])
async def list_attempts(quiz_id: int, session: AsyncSession = Depends(get_async_session)):
    quiz = await _get_quiz(session, quiz_id, published_only=False)
    if not quiz:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Quiz not found")
    res = await session.execute(
        select(QuizAttemptDB).where(QuizAttemptDB.quiz_id == quiz_id).order_by(QuizAttemptDB.id)
    )
    return res.scalars().all()
