"""Async client for the quiz catalog and grading endpoints."""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from ..config import QUIZ_API_TIMEOUT, QUIZ_API_URL
from ..exceptions import NetworkError, QuizNotFoundError, SubmitError
from ..schemas.quiz_schema import QuizDefinition
from ..schemas.submission_schema import SubmissionPayload, SubmissionResult

logger = logging.getLogger(__name__)


class QuizApiClient:
    """
    Talks to GET /quizzes/{id} and POST /quizzes/{id}/submit.

    Every failure is mapped onto the session error taxonomy: loading raises LoadError
    subclasses, submitting raises SubmitError. Nothing is retried here.
    """

    def __init__(self, base_url: str = QUIZ_API_URL, timeout: float = QUIZ_API_TIMEOUT,
                 client: Optional[httpx.AsyncClient] = None) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(base_url=base_url, timeout=timeout)

    async def __aenter__(self) -> "QuizApiClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def get_quiz(self, quiz_id) -> QuizDefinition:
        try:
            response = await self._client.get(f"/quizzes/{quiz_id}")
        except httpx.HTTPError as e:
            logger.warning("Transport error while loading quiz %s: %s", quiz_id, e)
            raise NetworkError(f"Could not reach quiz catalog: {e}") from e

        if response.status_code == httpx.codes.NOT_FOUND:
            raise QuizNotFoundError(quiz_id)
        if response.is_error:
            raise NetworkError(f"Quiz catalog answered {response.status_code} for quiz {quiz_id}")

        try:
            return QuizDefinition.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            # json decode errors are ValueErrors too
            raise NetworkError(f"Malformed quiz definition for quiz {quiz_id}: {e}") from e

    async def submit(self, quiz_id, payload: SubmissionPayload) -> SubmissionResult:
        try:
            response = await self._client.post(
                f"/quizzes/{quiz_id}/submit",
                json=payload.model_dump(mode="json"),
            )
        except httpx.HTTPError as e:
            logger.warning("Transport error while submitting quiz %s: %s", quiz_id, e)
            raise SubmitError(f"Could not reach grading service: {e}") from e

        if response.is_error:
            raise SubmitError(f"Grading service answered {response.status_code} for quiz {quiz_id}")

        try:
            return SubmissionResult.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise SubmitError(f"Malformed grading result for quiz {quiz_id}: {e}") from e
