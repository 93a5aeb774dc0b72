"""
Lifecycle of a single timed quiz attempt.

LOADING --load ok--> IN_PROGRESS --submit--> SUBMITTING --grade ok--> COMPLETED
LOADING --load fail--> LOAD_FAILED --load--> LOADING
IN_PROGRESS --countdown hits 0--> submit("timeout")
SUBMITTING --grade fail--> SUBMIT_FAILED --submit("manual")--> SUBMITTING

Everything runs on one event loop. The phase check plus the synchronous part of
_begin_submit is the only thing standing between a click and a timer expiry, so no
await may ever be placed before the phase flips to SUBMITTING.
"""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import Dict, List, Optional, Protocol

from ..exceptions import LoadError, SubmitError
from ..models.session_model import (
    AnswerDraft,
    SessionPhase,
    SessionState,
    SubmitTrigger,
    draft_for,
)
from ..schemas.quiz_schema import QuizDefinition
from ..schemas.submission_schema import SubmissionPayload, SubmissionResult
from .payload_service import build_submission_payload
from .ticker import AsyncioTicker, Ticker

logger = logging.getLogger(__name__)


class QuizCatalog(Protocol):
    async def get_quiz(self, quiz_id) -> QuizDefinition: ...


class GradingService(Protocol):
    async def submit(self, quiz_id, payload: SubmissionPayload) -> SubmissionResult: ...


def format_remaining(seconds: Optional[int]) -> str:
    """m:ss countdown text; empty for untimed quizzes."""
    if seconds is None:
        return ""
    seconds = max(0, seconds)
    return f"{seconds // 60}:{seconds % 60:02d}"


class QuizSession:
    """Drives one quiz attempt from load to graded result.

    Exactly one submission reaches the grader per transition out of IN_PROGRESS,
    whether it was asked for by the user or forced by the countdown.
    """

    def __init__(self, catalog: QuizCatalog, grader: Optional[GradingService] = None,
                 ticker: Optional[Ticker] = None) -> None:
        self._catalog = catalog
        # QuizApiClient serves both roles
        self._grader = grader if grader is not None else catalog
        self._ticker = ticker if ticker is not None else AsyncioTicker()

        self._phase: Optional[SessionPhase] = None
        self._quiz: Optional[QuizDefinition] = None
        self._answers: Dict[object, AnswerDraft] = {}
        self._remaining: Optional[int] = None
        self._result: Optional[SubmissionResult] = None
        self._trigger: Optional[SubmitTrigger] = None
        self._error: Optional[Exception] = None
        self._submit_task: Optional[asyncio.Task] = None

        # bumped on teardown; responses tagged with an older value are dropped
        self._generation = 0
        self._closed = False

    # --- state accessors ---

    @property
    def phase(self) -> SessionPhase:
        return self._phase or SessionPhase.LOADING

    @property
    def quiz(self) -> Optional[QuizDefinition]:
        return self._quiz

    @property
    def remaining_seconds(self) -> Optional[int]:
        return self._remaining

    @property
    def result(self) -> Optional[SubmissionResult]:
        return self._result

    @property
    def trigger(self) -> Optional[SubmitTrigger]:
        return self._trigger

    @property
    def error(self) -> Optional[Exception]:
        return self._error

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def answers(self) -> Dict[object, AnswerDraft]:
        return {qid: dataclasses.replace(d) for qid, d in self._answers.items()}

    def snapshot(self) -> SessionState:
        return SessionState(
            phase=self.phase,
            quiz=self._quiz,
            answers=self.answers,
            remaining_seconds=self._remaining,
            result=self._result,
            trigger=self._trigger,
            error=self._error,
        )

    # --- progress ---

    def is_answered(self, question_id) -> bool:
        draft = self._answers.get(question_id)
        return draft is not None and draft.answered

    @property
    def answered_count(self) -> int:
        return sum(1 for d in self._answers.values() if d.answered)

    def unanswered_question_ids(self) -> List[object]:
        if self._quiz is None:
            return []
        return [q.id for q in self._quiz.questions if not self.is_answered(q.id)]

    # --- operations ---

    async def load(self, quiz_id) -> Optional[QuizDefinition]:
        if self._closed:
            return None
        if self._phase not in (None, SessionPhase.LOAD_FAILED):
            logger.debug("Ignoring load(%s) in phase %s", quiz_id, self.phase.value)
            return self._quiz

        generation = self._generation
        self._phase = SessionPhase.LOADING
        self._error = None
        try:
            quiz = await self._catalog.get_quiz(quiz_id)
        except Exception as e:
            if generation != self._generation:
                logger.debug("Discarding load failure for closed session (quiz %s)", quiz_id)
                return None
            err = e if isinstance(e, LoadError) else LoadError(str(e))
            self._phase = SessionPhase.LOAD_FAILED
            self._error = err
            logger.warning("Loading quiz %s failed: %s", quiz_id, err)
            if err is e:
                raise
            raise err from e

        if generation != self._generation:
            logger.debug("Discarding quiz %s that arrived after teardown", quiz_id)
            return None

        self._quiz = quiz
        self._answers = {}
        self._remaining = quiz.time_limit_seconds
        self._phase = SessionPhase.IN_PROGRESS
        logger.info("Quiz %s loaded: %d questions, time limit %s",
                    quiz.id, len(quiz.questions), quiz.time_limit_seconds)

        if self._remaining is not None:
            if self._remaining == 0:
                self._begin_submit(SubmitTrigger.TIMEOUT)
            else:
                self._ticker.start(self.tick)
        return quiz

    def set_answer(self, question_id, value) -> None:
        """Overwrite the draft for question_id. Silently ignored unless IN_PROGRESS."""
        if self._closed or self._phase is not SessionPhase.IN_PROGRESS:
            logger.debug("Ignoring answer for question %s in phase %s", question_id, self.phase.value)
            return
        question = self._quiz.get_question(question_id)
        if question is None:
            logger.debug("Ignoring answer for unknown question %s", question_id)
            return
        self._answers[question_id] = draft_for(question, value)

    def clear_answer(self, question_id) -> None:
        self.set_answer(question_id, None)

    def tick(self) -> None:
        """One countdown step; reaching zero forces a submission exactly once."""
        if self._closed or self._phase is not SessionPhase.IN_PROGRESS or self._remaining is None:
            return
        self._remaining = max(0, self._remaining - 1)
        if self._remaining == 0:
            logger.info("Time is up for quiz %s", self._quiz.id)
            self._begin_submit(SubmitTrigger.TIMEOUT)

    async def submit(self, trigger=SubmitTrigger.MANUAL) -> Optional[SubmissionResult]:
        """
        Send the answers to the grader, or join the submission already in flight.

        Returns the stored result once COMPLETED and None when there is nothing to
        submit (not loaded yet, load failed, session closed). Raises SubmitError when
        grading fails; drafts are kept so a manual retry loses nothing.
        """
        task = self._begin_submit(SubmitTrigger(trigger))
        if task is None:
            return self._result
        # one impatient caller must not cancel the shared submission
        return await asyncio.shield(task)

    def close(self) -> None:
        """Tear the session down. Late responses are discarded from here on."""
        if self._closed:
            return
        self._ticker.stop()
        self._closed = True
        self._generation += 1
        logger.debug("Session closed in phase %s", self.phase.value)

    async def __aenter__(self) -> "QuizSession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()

    # --- internals ---

    def _begin_submit(self, trigger: SubmitTrigger) -> Optional[asyncio.Task]:
        if self._closed:
            return None
        if self._phase is SessionPhase.SUBMITTING:
            logger.debug("Submission already in flight; %s trigger joins it", trigger.value)
            return self._submit_task

        retry = self._phase is SessionPhase.SUBMIT_FAILED and trigger is SubmitTrigger.MANUAL
        if self._phase is not SessionPhase.IN_PROGRESS and not retry:
            logger.debug("Ignoring %s submit in phase %s", trigger.value, self.phase.value)
            return None

        # raises without a running loop; nothing has changed yet, so the attempt
        # stays IN_PROGRESS and the next tick or submit can still send it
        loop = asyncio.get_running_loop()

        # no tick may fire once we leave IN_PROGRESS
        self._ticker.stop()
        self._phase = SessionPhase.SUBMITTING
        self._trigger = trigger
        self._error = None
        payload = build_submission_payload(self._quiz, self._answers)
        logger.info("Submitting quiz %s (trigger=%s, %d/%d answered)",
                    self._quiz.id, trigger.value, self.answered_count, len(self._quiz.questions))

        task = loop.create_task(self._send(payload, self._generation))
        task.add_done_callback(self._submission_finished)
        self._submit_task = task
        return task

    async def _send(self, payload: SubmissionPayload, generation: int) -> Optional[SubmissionResult]:
        quiz_id = self._quiz.id
        try:
            result = await self._grader.submit(quiz_id, payload)
        except Exception as e:
            if generation != self._generation:
                logger.debug("Discarding grading failure for closed session (quiz %s)", quiz_id)
                return None
            err = e if isinstance(e, SubmitError) else SubmitError(str(e))
            self._phase = SessionPhase.SUBMIT_FAILED
            self._error = err
            logger.warning("Submitting quiz %s failed: %s", quiz_id, err)
            if err is e:
                raise
            raise err from e

        if generation != self._generation:
            logger.debug("Discarding grading result for closed session (quiz %s)", quiz_id)
            return None

        self._result = result
        self._phase = SessionPhase.COMPLETED
        logger.info("Quiz %s graded: score=%s passed=%s", quiz_id, result.score, result.passed)
        return result

    @staticmethod
    def _submission_finished(task: asyncio.Task) -> None:
        # timeout-driven submissions have no awaiting caller; fetch the error so
        # asyncio does not report it as never retrieved
        if not task.cancelled():
            task.exception()
