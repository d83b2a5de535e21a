"""
Business risk quiz state machine.
"""
import pytest

from legallylegit.errors import QuizCompletedError
from legallylegit.models.quiz import QUIZ_QUESTIONS
from legallylegit.models.risk import RiskLevel
from legallylegit.services.quiz_engine import QuizEngine, classify_quiz_score, run_quiz


def test_initial_state():
    engine = QuizEngine()
    assert engine.current_index == 0
    assert engine.score == 0
    assert engine.answers == [None] * len(QUIZ_QUESTIONS)
    assert engine.result is None


def test_re_answer_replaces_contribution():
    engine = QuizEngine()
    first = QUIZ_QUESTIONS[0]
    worth_20 = first.scores.index(20)
    worth_5 = first.scores.index(5)

    engine.answer(worth_20)
    assert engine.score == 20
    engine.go_back()
    engine.answer(worth_5)

    assert engine.score == 5
    assert engine.answers[0] == worth_5
    assert engine.current_index == 1


def test_answer_by_explicit_index_does_not_double_count():
    engine = QuizEngine()
    engine.answer(1, question_index=0)
    engine.answer(2, question_index=0)
    assert engine.score == QUIZ_QUESTIONS[0].scores[2]


def test_completion_classifies_and_locks():
    engine = QuizEngine()
    results = [engine.answer(0) for _ in QUIZ_QUESTIONS]
    assert results[:-1] == [None] * (len(QUIZ_QUESTIONS) - 1)
    result = results[-1]
    assert engine.is_complete
    assert result.score == sum(q.scores[0] for q in QUIZ_QUESTIONS)
    assert result.risk == RiskLevel.LOW

    with pytest.raises(QuizCompletedError):
        engine.answer(0)


def test_worst_answers_are_critical():
    worst = [q.scores.index(max(q.scores)) for q in QUIZ_QUESTIONS]
    result = run_quiz(worst)
    assert result.score == sum(max(q.scores) for q in QUIZ_QUESTIONS)
    assert result.risk == RiskLevel.CRITICAL
    assert result.message.startswith("Urgent action required!")


@pytest.mark.parametrize("score,level", [
    (0, RiskLevel.LOW),
    (20, RiskLevel.LOW),
    (21, RiskLevel.MEDIUM),
    (50, RiskLevel.MEDIUM),
    (51, RiskLevel.HIGH),
    (80, RiskLevel.HIGH),
    (81, RiskLevel.CRITICAL),
])
def test_score_bands(score, level):
    assert classify_quiz_score(score).risk == level


def test_bands_are_monotonic():
    severities = [classify_quiz_score(s).risk.severity for s in range(0, 121)]
    assert severities == sorted(severities)


def test_invalid_option_rejected():
    engine = QuizEngine()
    with pytest.raises(IndexError):
        engine.answer(len(QUIZ_QUESTIONS[0].options))
    assert engine.score == 0


def test_run_quiz_requires_all_answers():
    with pytest.raises(ValueError):
        run_quiz([0])
