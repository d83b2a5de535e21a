"""Business Risk Quiz Models"""

from pydantic import BaseModel, model_validator
from typing import List

from legallylegit.models.risk import RiskLevel


class QuizQuestion(BaseModel):
    question_id: int
    question: str
    options: List[str]
    scores: List[int]

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _scores_parallel_to_options(self):
        if not self.options or len(self.options) != len(self.scores):
            raise ValueError(f"Question {self.question_id} needs one score per option")
        return self


class QuizResult(BaseModel):
    score: int
    risk: RiskLevel
    message: str


QUIZ_QUESTIONS: List[QuizQuestion] = [
    QuizQuestion(
        question_id=1,
        question="How do you engage people to perform work for your business?",
        options=[
            "Only permanent employees on payroll",
            "A mix of employees and independent contractors",
            "Mainly independent contractors or freelancers",
            "I'm a sole trader working alone",
        ],
        scores=[5, 20, 30, 0],
    ),
    QuizQuestion(
        question_id=2,
        question="Do you have formal, written contracts for all your employees and contractors?",
        options=[
            "Yes, everyone has a signed, up-to-date agreement",
            "Some people do, but not all",
            "Only for employees, not contractors",
            "No, we mainly use verbal agreements",
        ],
        scores=[0, 15, 20, 35],
    ),
    QuizQuestion(
        question_id=3,
        question="Does your website or app collect personal information from users (e.g., names, emails)?",
        options=[
            "Yes, and we have a Privacy Policy that explains how we use it",
            "Yes, but we don't have a formal Privacy Policy",
            "No, we don't collect any user data",
            "I'm not sure what information we collect",
        ],
        scores=[0, 30, 0, 25],
    ),
    QuizQuestion(
        question_id=4,
        question="How do you handle client work or service provisions?",
        options=[
            "We use a detailed Client Service Agreement for every project",
            "We send a quote or proposal that outlines the basics",
            "We usually just agree on the scope and price over email",
            "We rely on verbal agreements and trust",
        ],
        scores=[0, 15, 25, 30],
    ),
]
