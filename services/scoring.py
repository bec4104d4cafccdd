"""
Pure scoring helpers for quiz attempts.

Nothing in this module touches the database: the attempt service hands in an
answer key (``[{"id", "right_answer", "points"}]``) and the submitted answers
(``[{"question_id", "selected_choice", "time_taken"}]``) and gets plain dicts
and numbers back.
"""
import math
from typing import Any, Dict, Iterable, List, Sequence, Tuple

FEEDBACK_EXCELLENT = "Excellent! You aced this quiz."
FEEDBACK_GREAT = "Great job! You really know your stuff."
FEEDBACK_PASSED = "Good work! You passed the quiz."
FEEDBACK_CLOSE = "So close! Try again, you can do it."
FEEDBACK_KEEP_STUDYING = "Keep studying and try again soon."


def round_half_up(value: float) -> int:
    """Round .5 away from zero for non-negative values (built-in round() is banker's)."""
    return int(math.floor(value + 0.5))


def build_answer_key(questions: Iterable[Any]) -> List[Dict[str, Any]]:
    """Reduce Question rows to the fields scoring needs."""
    return [
        {"id": q.id, "right_answer": q.right_answer, "points": q.points}
        for q in questions
    ]


def _same_value(submitted: Any, expected: Any) -> bool:
    # No coercion: "0" or True never match index 0
    return type(submitted) is type(expected) and submitted == expected


def score_answers(
    answer_key: Sequence[Dict[str, Any]], answers: Iterable[Dict[str, Any]]
) -> Tuple[List[Dict[str, Any]], int]:
    """
    Score submitted answers against an answer key.

    Answers pointing at a question id that is not in the key are dropped, as
    are repeated answers to a question already scored (the first one counts).
    Returns the processed answers in submission order and the total score.
    """
    by_id = {q["id"]: q for q in answer_key}
    seen = set()
    processed = []
    total_score = 0

    for answer in answers:
        question_id = answer.get("question_id")
        try:
            question = by_id.get(question_id)
        except TypeError:  # unhashable id in a malformed payload
            question = None
        if question is None or not _same_value(question_id, question["id"]):
            continue
        if question["id"] in seen:
            continue
        seen.add(question["id"])

        selected = answer.get("selected_choice")
        is_correct = _same_value(selected, question["right_answer"])
        points_earned = question["points"] if is_correct else 0
        total_score += points_earned

        processed.append({
            "question_id": question_id,
            "selected_choice": selected,
            "is_correct": is_correct,
            "points_earned": points_earned,
            "time_taken": answer.get("time_taken") or 0,
        })

    return processed, total_score


def max_possible_score(answer_key: Sequence[Dict[str, Any]]) -> int:
    return sum(q["points"] for q in answer_key)


def percentage_score(total_score: int, max_score: int) -> int:
    """Integer percentage; a quiz worth zero points scores 0."""
    if max_score <= 0:
        return 0
    return round_half_up(total_score / max_score * 100)


def feedback_for(score: int, passing_score: int) -> str:
    if score >= 90:
        return FEEDBACK_EXCELLENT
    elif score >= 80:
        return FEEDBACK_GREAT
    elif score >= passing_score:
        return FEEDBACK_PASSED
    elif score >= passing_score - 10:
        return FEEDBACK_CLOSE
    return FEEDBACK_KEEP_STUDYING
