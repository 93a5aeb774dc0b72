from typing import Dict, List

from ..models.session_model import AnswerDraft, draft_for
from ..schemas.quiz_schema import QuizDefinition
from ..schemas.submission_schema import AnswerEntry, SubmissionPayload


def build_answer_entries(quiz: QuizDefinition, answers: Dict[object, AnswerDraft]) -> List[AnswerEntry]:
    """
    One entry per quiz question, in quiz order (not the order answers were given).
    Questions without a draft are emitted as unanswered.
    """
    entries = []
    for q in quiz.questions:
        draft = answers.get(q.id)
        if draft is None:
            draft = draft_for(q)
        entries.append(draft.to_entry(q.id))
    return entries


def build_submission_payload(quiz: QuizDefinition, answers: Dict[object, AnswerDraft]) -> SubmissionPayload:
    return SubmissionPayload(quiz_id=quiz.id, answers=build_answer_entries(quiz, answers))
