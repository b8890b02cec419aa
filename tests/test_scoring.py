from portal.services.scoring import (
    compute_category_scores,
    is_correct_response,
    normalize_selection,
    score_question,
)


class DummyQuestion:
    def __init__(self, correct, type="mcq", category_name=None):
        self.type = type
        self.category_name = category_name
        self.correct_options = set(correct)


def test_exact_set_equality_only():
    q = DummyQuestion({"A", "C"})

    assert score_question(q, ["A", "C"]) == 100
    assert score_question(q, ["C", "A"]) == 100

    # subsets, supersets and empty answers get nothing
    assert score_question(q, ["A"]) == 0
    assert score_question(q, ["A", "B", "C"]) == 0
    assert score_question(q, []) == 0
    assert score_question(q, None) == 0


def test_single_answer_question():
    q = DummyQuestion({"4"})
    assert score_question(q, ["4"]) == 100
    assert score_question(q, ["3"]) == 0
    assert score_question(q, ["3", "4"]) == 0


def test_is_correct_response_ignores_duplicates():
    assert is_correct_response({"A"}, ["A", "A"])
    assert not is_correct_response({"A"}, None)


def test_normalize_selection_keeps_first_occurrence():
    assert normalize_selection(["B", "A", "B"]) == ["B", "A"]
    assert normalize_selection(None) == []


def test_category_mean_of_question_scores():
    questions = [
        DummyQuestion({"A"}, category_name="Math"),
        DummyQuestion({"B"}, category_name="Math"),
    ]
    scores = compute_category_scores(questions, {"0": ["A"], "1": ["A"]})
    assert scores == {"Math": 50}


def test_unanswered_questions_count_as_zero():
    questions = [
        DummyQuestion({"A"}, category_name="Math"),
        DummyQuestion({"B"}, category_name="Math"),
        DummyQuestion({"C"}, category_name="Math"),
    ]
    scores = compute_category_scores(questions, {"0": ["A"]})
    assert scores == {"Math": 33.33}


def test_descriptive_and_uncategorised_questions_are_excluded():
    questions = [
        DummyQuestion({"A"}, category_name="Logic"),
        DummyQuestion(set(), type="descriptive", category_name="Logic"),
        DummyQuestion({"B"}),
    ]
    scores = compute_category_scores(questions, {"0": ["A"], "2": ["B"]})
    assert scores == {"Logic": 100}


def test_no_responses_gives_zero_per_category():
    questions = [DummyQuestion({"A"}, category_name="Math")]
    assert compute_category_scores(questions, None) == {"Math": 0}
    assert compute_category_scores([], {"0": ["A"]}) == {}
