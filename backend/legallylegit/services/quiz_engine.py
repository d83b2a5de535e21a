"""Business Risk Quiz Engine

One-shot state machine over the fixed quiz questions. Re-answering a
question replaces its contribution to the score instead of adding to it.
A finished engine is not reusable.
"""

from typing import List, Optional, Sequence, Tuple
import logging

from legallylegit.errors import QuizCompletedError
from legallylegit.models.quiz import QUIZ_QUESTIONS, QuizQuestion, QuizResult
from legallylegit.models.risk import RiskLevel

logger = logging.getLogger(__name__)

# (exclusive lower bound, level, message), highest first
QUIZ_BANDS: List[Tuple[int, RiskLevel, str]] = [
    (80, RiskLevel.CRITICAL,
     "Urgent action required! Your business has significant legal vulnerabilities "
     "that could lead to severe penalties."),
    (50, RiskLevel.HIGH,
     "High risk detected. You have several key legal gaps that should be addressed "
     "as soon as possible."),
    (20, RiskLevel.MEDIUM,
     "There are some areas for improvement. Proactively strengthening your legal "
     "documents now can save you headaches later."),
]

LOW_RISK_MESSAGE = (
    "You're in great shape! Your foundational legal protections seem to be in a good place."
)


def classify_quiz_score(score: int) -> QuizResult:
    for lower_bound, level, message in QUIZ_BANDS:
        if score > lower_bound:
            return QuizResult(score=score, risk=level, message=message)
    return QuizResult(score=score, risk=RiskLevel.LOW, message=LOW_RISK_MESSAGE)


class QuizEngine:
    """Quiz state: current index, cumulative score and per-question answers."""

    def __init__(self, questions: Sequence[QuizQuestion] = QUIZ_QUESTIONS):
        if not questions:
            raise ValueError("A quiz needs at least one question")
        self.questions = list(questions)
        self.current_index = 0
        self.score = 0
        self.answers: List[Optional[int]] = [None] * len(self.questions)
        self.result: Optional[QuizResult] = None

    @property
    def is_complete(self) -> bool:
        return self.result is not None

    @property
    def current_question(self) -> Optional[QuizQuestion]:
        if self.is_complete:
            return None
        return self.questions[self.current_index]

    def answer(self, option_index: int, question_index: Optional[int] = None) -> Optional[QuizResult]:
        """Record an answer; returns the result once the last question is answered."""
        if self.is_complete:
            raise QuizCompletedError("This quiz has already been completed. Start a new one.")

        index = self.current_index if question_index is None else question_index
        if not 0 <= index < len(self.questions):
            raise IndexError(f"No question at index {index}")
        question = self.questions[index]
        if not 0 <= option_index < len(question.options):
            raise IndexError(f"Question {question.question_id} has no option {option_index}")

        previous = self.answers[index]
        if previous is not None:
            self.score -= question.scores[previous]
        self.score += question.scores[option_index]
        self.answers[index] = option_index

        if index == len(self.questions) - 1:
            self.result = classify_quiz_score(self.score)
            logger.info(f"Quiz completed: score={self.score} risk={self.result.risk.value}")
            return self.result

        self.current_index = index + 1
        return None

    def go_back(self) -> None:
        if self.is_complete:
            raise QuizCompletedError("This quiz has already been completed. Start a new one.")
        if self.current_index > 0:
            self.current_index -= 1


def run_quiz(answers: Sequence[int], questions: Sequence[QuizQuestion] = QUIZ_QUESTIONS) -> QuizResult:
    """Score a full set of answers, one option index per question."""
    if len(answers) != len(questions):
        raise ValueError(f"Expected {len(questions)} answers, got {len(answers)}")
    engine = QuizEngine(questions)
    result = None
    for option_index in answers:
        result = engine.answer(option_index)
    return result
