from typing import Dict, Any, Tuple, List

from ..schemas.submission_schema import ChoiceAnswerEntry, SubmissionPayload


def answers_by_question(payload: SubmissionPayload) -> Dict[str, Any]:
    """Flatten submitted entries to question_id (str) -> selected option id / text response."""
    out: Dict[str, Any] = {}
    for entry in payload.answers:
        if isinstance(entry, ChoiceAnswerEntry):
            out[str(entry.question_id)] = entry.selected_option_id
        else:
            out[str(entry.question_id)] = entry.text_response
    return out


def _normalize_text(value: Any) -> str:
    return " ".join(str(value).split()).lower()


def grade_submission(answers: Dict[str, Any], questions: List[Any]) -> Tuple[Dict[str, bool | None], float, float]:
    """
    Grade the given answers against the provided questions.
    - answers: mapping question_id (str) -> selected option id or text response
    - questions: list of ORM quiz questions (must have id, type, correct_option_id, accepted_answers, points)

    Returns (question_results, earned_points, total_points).
    Text questions without accepted answers cannot be judged: their result is None and
    they earn nothing, but their points still count towards the total.
    """
    question_results: Dict[str, bool | None] = {}
    earned = 0.0
    total = 0.0

    for q in questions:
        qid_str = str(q.id)
        points = float(q.points or 0)
        total += points
        ans = answers.get(qid_str)

        if q.type in ("single_choice", "true_false"):
            correct = ans is not None and ans == q.correct_option_id
            # option ids may arrive as "2" for a stored 2
            if not correct and ans is not None and q.correct_option_id is not None:
                correct = str(ans) == str(q.correct_option_id)
        else:
            accepted = [_normalize_text(a) for a in (q.accepted_answers or [])]
            if not accepted:
                question_results[qid_str] = None
                continue
            correct = bool(ans) and _normalize_text(ans) in accepted

        question_results[qid_str] = correct
        if correct:
            earned += points

    return question_results, earned, total


def score_percentage(earned: float, total: float) -> float:
    if total <= 0:
        return 0.0
    return round((earned / total) * 100, 1)
