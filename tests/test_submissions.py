from tests.conftest import TestingSessionLocal

from portal.models.submission import Submission


def submit(client, headers, assessment_id, content="answer", **extra):
    payload = {"assessment_id": str(assessment_id), "content": content}
    payload.update(extra)
    return client.post("/submissions", headers=headers, json=payload)


def test_create_descriptive_submission(client, student_headers, seed_data):
    r = submit(client, student_headers, seed_data["essay"], tab_switches=2)
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["evaluation_status"] == "pending"
    assert body["tab_switches"] == 2
    assert body["user_id"] == seed_data["student"]
    assert body["grade"] is None
    assert body["feedback"] is None
    assert body["evaluated_at"] is None
    assert body["mcq_responses"] == {}
    assert body["challenge"] is None


def test_second_submission_is_rejected_and_first_untouched(client, student_headers, seed_data):
    r1 = submit(client, student_headers, seed_data["essay"], content="first")
    assert r1.status_code == 201, r1.text

    r2 = submit(client, student_headers, seed_data["essay"], content="second")
    assert r2.status_code == 409
    assert r2.json()["code"] == "duplicate_submission"
    assert r2.json()["detail"] == "You have already submitted this assessment"

    db = TestingSessionLocal()
    try:
        rows = db.query(Submission).filter(Submission.assessment_id == seed_data["essay"]).all()
        assert len(rows) == 1
        assert rows[0].content == "first"
    finally:
        db.close()


def test_other_students_can_submit_same_assessment(client, student_headers, other_headers, seed_data):
    assert submit(client, student_headers, seed_data["essay"]).status_code == 201
    assert submit(client, other_headers, seed_data["essay"]).status_code == 201


def test_inactive_assessment(client, student_headers, admin_headers, seed_data):
    r = submit(client, student_headers, seed_data["retired"])
    assert r.status_code == 400
    assert r.json()["code"] == "inactive_assessment"

    # admins bypass the active flag
    r = submit(client, admin_headers, seed_data["retired"])
    assert r.status_code == 201, r.text


def test_content_is_required(client, student_headers, seed_data):
    r = submit(client, student_headers, seed_data["essay"], content="   ")
    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"

    r = client.post("/submissions", headers=student_headers, json={"assessment_id": str(seed_data["essay"])})
    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"


def test_negative_tab_switches_rejected(client, student_headers, seed_data):
    r = submit(client, student_headers, seed_data["essay"], tab_switches=-1)
    assert r.status_code == 400


def test_unknown_or_malformed_assessment(client, student_headers):
    r = submit(client, student_headers, 9999)
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"

    r = submit(client, student_headers, "abc123")
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"


def test_mcq_submission_computes_category_scores(client, student_headers, seed_data):
    r = submit(
        client,
        student_headers,
        seed_data["quiz"],
        content="MCQ-only answers",
        mcq_responses={
            "0": ["4"],  # Math, correct
            "1": ["2"],  # Math, subset of {2, 5}
            "2": ["false"],  # Logic, correct
            "4": ["yes"],  # no category
        },
    )
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["category_scores"] == {"Math": 50.0, "Logic": 100.0}
    assert body["mcq_responses"]["1"] == ["2"]
    # grade stays manual
    assert body["grade"] is None


def test_mcq_answer_keys_must_match_mcq_questions(client, student_headers, seed_data):
    # index 3 is the descriptive question
    r = submit(client, student_headers, seed_data["quiz"], mcq_responses={"3": ["x"]})
    assert r.status_code == 400
    assert r.json()["code"] == "validation_error"

    r = submit(client, student_headers, seed_data["quiz"], mcq_responses={"42": ["x"]})
    assert r.status_code == 400


def test_list_mine_and_all(client, student_headers, other_headers, admin_headers, seed_data):
    submit(client, student_headers, seed_data["essay"])
    submit(client, student_headers, seed_data["quiz"])
    submit(client, other_headers, seed_data["essay"])

    mine = client.get("/submissions/me", headers=student_headers)
    assert mine.status_code == 200
    assert len(mine.json()) == 2
    assert all(s["user_id"] == seed_data["student"] for s in mine.json())
    assert {s["assessment"]["title"] for s in mine.json()} == {"Essay", "Quiz"}

    everything = client.get("/submissions", headers=admin_headers)
    assert everything.status_code == 200
    assert len(everything.json()) == 3
    assert {s["user"]["email"] for s in everything.json()} == {"student1@example.com", "student2@example.com"}

    by_assessment = client.get(f"/submissions/assessment/{seed_data['essay']}", headers=admin_headers)
    assert by_assessment.status_code == 200
    assert len(by_assessment.json()) == 2


def test_get_by_id_owner_or_admin(client, student_headers, other_headers, admin_headers, seed_data):
    sid = submit(client, student_headers, seed_data["essay"]).json()["id"]

    r = client.get(f"/submissions/{sid}", headers=student_headers)
    assert r.status_code == 200
    assert r.json()["assessment"]["id"] == seed_data["essay"]
    assert r.json()["user"]["email"] == "student1@example.com"

    assert client.get(f"/submissions/{sid}", headers=admin_headers).status_code == 200

    r = client.get(f"/submissions/{sid}", headers=other_headers)
    assert r.status_code == 403
    assert r.json()["code"] == "not_authorized"


def test_get_unknown_submission(client, admin_headers):
    assert client.get("/submissions/9999", headers=admin_headers).status_code == 404
    r = client.get("/submissions/64f1c0ffee", headers=admin_headers)
    assert r.status_code == 404
    assert r.json()["code"] == "not_found"


def test_null_tab_switches_counts_as_zero(client, student_headers, seed_data):
    r = submit(client, student_headers, seed_data["essay"], tab_switches=None)
    assert r.status_code == 201, r.text
    assert r.json()["tab_switches"] == 0


def test_admin_detail_carries_questions_with_correctness(client, student_headers, admin_headers, seed_data):
    sid = submit(client, student_headers, seed_data["quiz"], mcq_responses={"0": ["4"]}).json()["id"]

    r = client.get(f"/submissions/{sid}", headers=admin_headers)
    assert r.status_code == 200, r.text
    assessment = r.json()["assessment"]
    assert [q["position"] for q in assessment["questions"]] == [0, 1, 2, 3, 4]
    primes = assessment["questions"][1]
    assert {o["text"] for o in primes["options"] if o["is_correct"]} == {"2", "5"}
    assert assessment["has_submissions"] is True


def test_student_detail_carries_questions_without_correctness(client, student_headers, seed_data):
    sid = submit(client, student_headers, seed_data["quiz"], mcq_responses={"0": ["4"]}).json()["id"]

    r = client.get(f"/submissions/{sid}", headers=student_headers)
    assert r.status_code == 200, r.text
    assert "is_correct" not in r.text
    questions = r.json()["assessment"]["questions"]
    assert len(questions) == 5
    assert questions[0]["options"] == [{"text": "3"}, {"text": "4"}, {"text": "5"}]
    assert r.json()["mcq_responses"] == {"0": ["4"]}
