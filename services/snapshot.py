import random
from typing import Any, Dict, Optional


def build_attempt_view(quiz: Any, rng: Optional[random.Random] = None) -> Dict[str, Any]:
    """
    Learner-facing copy of a quiz.

    Right answers and explanations are left out. With shuffle_questions set the
    copy gets a fresh Fisher-Yates permutation on every call; the quiz itself is
    never reordered.
    """
    questions = [
        {
            "id": q.id,
            "text": q.text,
            "choices": list(q.choices),
            "points": q.points,
            "difficulty": q.difficulty,
        }
        for q in quiz.questions
    ]

    if quiz.shuffle_questions:
        (rng or random).shuffle(questions)

    return {
        "id": quiz.id,
        "title": quiz.title,
        "description": quiz.description,
        "category": quiz.category,
        "time_limit": quiz.time_limit,
        "questions": questions,
    }
