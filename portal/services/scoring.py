from typing import Dict, Iterable, List, Mapping


def normalize_selection(selected: Iterable[str] | None) -> List[str]:
    """Drop duplicate option texts while keeping the order the student chose them in."""
    if not selected:
        return []
    seen: List[str] = []
    for text in selected:
        if text not in seen:
            seen.append(text)
    return seen


def is_correct_response(correct: Iterable[str], selected: Iterable[str] | None) -> bool:
    # exact set equality: no partial credit for subsets or supersets
    return set(correct) == set(selected or ())


def score_question(question, selected: Iterable[str] | None) -> int:
    """
    Score one MCQ question as 0 or 100.
    - question: object exposing ``correct_options`` (set of option texts)
    - selected: option texts picked by the student (None when unanswered)

    Single- and multi-answer questions are graded the same way.
    """
    correct = question.correct_options
    if not correct:
        return 0
    return 100 if is_correct_response(correct, selected) else 0


def compute_category_scores(questions: List, mcq_responses: Mapping[str, List[str]] | None) -> Dict[str, float]:
    """
    Aggregate MCQ correctness per category.
    - questions: ordered question objects (must have type, category_name, correct_options);
      the list index is the key used in ``mcq_responses``
    - mcq_responses: mapping question index (str) -> selected option texts

    Returns category name -> percentage (mean of 0/100 question scores).
    Descriptive and uncategorised questions are left out; descriptive credit
    only exists in the admin's grade.
    """
    responses = mcq_responses or {}
    buckets: Dict[str, List[int]] = {}

    for index, question in enumerate(questions):
        if question.type != "mcq" or not question.category_name:
            continue
        score = score_question(question, responses.get(str(index)))
        buckets.setdefault(question.category_name, []).append(score)

    return {
        name: round(sum(scores) / len(scores), 2)
        for name, scores in buckets.items()
    }
