import random
from collections import Counter
from types import SimpleNamespace

import pytest

from services.snapshot import build_attempt_view


def make_quiz(count=3, shuffle=False):
    questions = [
        SimpleNamespace(
            id=i + 1,
            text=f"Question {i + 1}",
            choices=["a", "b", "c"],
            right_answer=i % 3,
            explanation="because",
            points=10,
            difficulty="easy",
        )
        for i in range(count)
    ]
    return SimpleNamespace(
        id=7,
        title="Sample",
        description="desc",
        category="general",
        time_limit=15,
        shuffle_questions=shuffle,
        questions=questions,
    )


def test_view_hides_answers():
    view = build_attempt_view(make_quiz())

    assert view["id"] == 7
    assert view["title"] == "Sample"
    assert view["time_limit"] == 15
    for question in view["questions"]:
        assert "right_answer" not in question
        assert "explanation" not in question
        assert set(question) == {"id", "text", "choices", "points", "difficulty"}


def test_order_preserved_without_shuffle():
    view = build_attempt_view(make_quiz(count=5))
    assert [q["id"] for q in view["questions"]] == [1, 2, 3, 4, 5]


def test_shuffle_does_not_reorder_quiz():
    quiz = make_quiz(count=6, shuffle=True)
    for seed in range(20):
        build_attempt_view(quiz, rng=random.Random(seed))
    assert [q.id for q in quiz.questions] == [1, 2, 3, 4, 5, 6]


def test_shuffle_keeps_every_question():
    view = build_attempt_view(make_quiz(count=6, shuffle=True), rng=random.Random(3))
    assert sorted(q["id"] for q in view["questions"]) == [1, 2, 3, 4, 5, 6]


def test_shuffle_is_reproducible_with_seed():
    quiz = make_quiz(count=6, shuffle=True)
    first = build_attempt_view(quiz, rng=random.Random(42))
    second = build_attempt_view(quiz, rng=random.Random(42))
    assert [q["id"] for q in first["questions"]] == [q["id"] for q in second["questions"]]


def test_choices_are_copied():
    quiz = make_quiz(count=1)
    view = build_attempt_view(quiz)
    view["questions"][0]["choices"].append("d")
    assert quiz.questions[0].choices == ["a", "b", "c"]


def test_shuffle_is_roughly_uniform():
    quiz = make_quiz(count=3, shuffle=True)
    rng = random.Random(2024)
    runs = 6000

    counts = Counter(
        tuple(q["id"] for q in build_attempt_view(quiz, rng=rng)["questions"])
        for _ in range(runs)
    )

    assert len(counts) == 6
    for permutation, seen in counts.items():
        assert seen == pytest.approx(runs / 6, abs=150), permutation
