import copy

import pytest
from fastapi.testclient import TestClient

from conftest import SAMPLE_QUIZ
from quizflow.app import app


@pytest.fixture
def client(test_db):
    # no context manager: lifespan would create tables on the default database
    return TestClient(app)


def create_quiz(client, data=SAMPLE_QUIZ):
    response = client.post("/quizzes", json=data)
    assert response.status_code == 201, response.text
    return response.json()


def answers_for(quiz, choices=None, texts=None):
    choices = choices or {}
    texts = texts or {}
    out = []
    for q in quiz["questions"]:
        if q["type"] in ("single_choice", "true_false"):
            out.append({"question_id": q["id"], "selected_option_id": choices.get(q["id"])})
        else:
            out.append({"question_id": q["id"], "text_response": texts.get(q["id"], "")})
    return out


def test_created_quiz_hides_answer_key(client):
    created = create_quiz(client)
    response = client.get(f"/quizzes/{created['id']}")
    assert response.status_code == 200

    quiz = response.json()
    assert quiz["title"] == "Capitals"
    assert quiz["time_limit_seconds"] == 120
    assert quiz["pass_threshold"] == 50
    assert [q["type"] for q in quiz["questions"]] == ["single_choice", "true_false", "short_answer", "long_answer"]
    assert quiz["questions"][0]["options"] == [{"id": "a", "text": "Paris"}, {"id": "b", "text": "Lyon"}]
    for q in quiz["questions"]:
        assert "correct_option_id" not in q
        assert "accepted_answers" not in q


def test_unknown_quiz_is_404(client):
    assert client.get("/quizzes/12345").status_code == 404
    response = client.post("/quizzes/12345/submit", json={"quiz_id": 12345, "answers": []})
    assert response.status_code == 404


def test_unpublished_quiz_is_hidden(client):
    data = copy.deepcopy(SAMPLE_QUIZ)
    data["is_published"] = False
    created = create_quiz(client, data)
    assert client.get(f"/quizzes/{created['id']}").status_code == 404


def test_submit_best_possible_answers(client):
    quiz = create_quiz(client)
    q1, q2, q3, q4 = [q["id"] for q in quiz["questions"]]
    answers = answers_for(quiz, choices={q1: "a", q2: "t"}, texts={q3: " rome ", q4: "A long essay"})

    response = client.post(f"/quizzes/{quiz['id']}/submit", json={"quiz_id": quiz["id"], "answers": answers})
    assert response.status_code == 200, response.text
    result = response.json()

    # the long answer has no key: 5 of 10 points can never be earned automatically
    assert result["score"] == 50.0
    assert result["passed"] is True
    assert result["correct_answers"] == 3
    assert result["total_questions"] == 4
    assert result["question_results"] == {str(q1): True, str(q2): True, str(q3): True, str(q4): None}


def test_submit_all_unanswered(client):
    quiz = create_quiz(client)
    response = client.post(f"/quizzes/{quiz['id']}/submit", json={"quiz_id": quiz["id"], "answers": answers_for(quiz)})
    assert response.status_code == 200
    assert response.json()["score"] == 0.0
    assert response.json()["passed"] is False


def test_submit_rejects_mismatched_quiz_id(client):
    quiz = create_quiz(client)
    response = client.post(f"/quizzes/{quiz['id']}/submit", json={"quiz_id": quiz["id"] + 1, "answers": []})
    assert response.status_code == 400


def test_submit_rejects_unknown_question(client):
    quiz = create_quiz(client)
    response = client.post(
        f"/quizzes/{quiz['id']}/submit",
        json={"quiz_id": quiz["id"], "answers": [{"question_id": 999, "text_response": "?"}]},
    )
    assert response.status_code == 400


def test_submit_rejects_text_answer_for_choice_question(client):
    quiz = create_quiz(client)
    choice_q = quiz["questions"][0]
    answers = answers_for(quiz)
    # "a" is the correct option id; sent as text it must not score
    answers[0] = {"question_id": choice_q["id"], "text_response": "a"}

    response = client.post(f"/quizzes/{quiz['id']}/submit", json={"quiz_id": quiz["id"], "answers": answers})
    assert response.status_code == 400
    assert str(choice_q["id"]) in response.json()["detail"]
    assert client.get(f"/quizzes/{quiz['id']}/attempts").json() == []


def test_submit_rejects_choice_answer_for_text_question(client):
    quiz = create_quiz(client)
    text_q = quiz["questions"][2]
    answers = answers_for(quiz)
    answers[2] = {"question_id": text_q["id"], "selected_option_id": "a"}

    response = client.post(f"/quizzes/{quiz['id']}/submit", json={"quiz_id": quiz["id"], "answers": answers})
    assert response.status_code == 400


def test_submit_rejects_duplicate_question_entries(client):
    quiz = create_quiz(client)
    choice_q = quiz["questions"][0]
    answers = answers_for(quiz, choices={choice_q["id"]: "b"})
    answers.append({"question_id": choice_q["id"], "selected_option_id": "a"})

    response = client.post(f"/quizzes/{quiz['id']}/submit", json={"quiz_id": quiz["id"], "answers": answers})
    assert response.status_code == 400
    assert "more than once" in response.json()["detail"]
    assert client.get(f"/quizzes/{quiz['id']}/attempts").json() == []


def test_submit_rejects_malformed_entry(client):
    quiz = create_quiz(client)
    response = client.post(
        f"/quizzes/{quiz['id']}/submit",
        json={"quiz_id": quiz["id"], "answers": [{"question_id": 1, "selected_option_id": "a", "text_response": "x"}]},
    )
    assert response.status_code == 422


def test_attempts_are_recorded(client):
    quiz = create_quiz(client)
    q1 = quiz["questions"][0]["id"]
    for choice in ("b", "a"):
        client.post(
            f"/quizzes/{quiz['id']}/submit",
            json={"quiz_id": quiz["id"], "answers": answers_for(quiz, choices={q1: choice})},
        )

    response = client.get(f"/quizzes/{quiz['id']}/attempts")
    assert response.status_code == 200
    attempts = response.json()
    assert [a["score"] for a in attempts] == [0.0, 30.0]
    assert [a["passed"] for a in attempts] == [False, False]
    assert attempts[1]["answers"][0] == {"question_id": q1, "selected_option_id": "a"}


def test_create_quiz_validates_answer_key(client):
    data = copy.deepcopy(SAMPLE_QUIZ)
    data["questions"][0]["correct_option_id"] = "z"
    assert client.post("/quizzes", json=data).status_code == 422
