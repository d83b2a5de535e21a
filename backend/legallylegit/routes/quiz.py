"""Business Risk Quiz Routes

- GET /api/quiz/questions
- POST /api/quiz/score - Score a completed run (one option index per question)
"""

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel
from typing import List

from legallylegit.models.quiz import QUIZ_QUESTIONS, QuizResult
from legallylegit.services.quiz_engine import run_quiz

router = APIRouter(prefix="/api/quiz", tags=["Quiz"])


class QuizAnswers(BaseModel):
    answers: List[int]


@router.get("/questions")
async def get_questions():
    return {"questions": [q.model_dump(exclude={"scores"}) for q in QUIZ_QUESTIONS]}


@router.post("/score", response_model=QuizResult)
async def score_quiz(data: QuizAnswers):
    try:
        return run_quiz(data.answers)
    except (ValueError, IndexError) as e:
        raise HTTPException(status_code=422, detail={"error_code": "VALIDATION_FAILED", "message": str(e)})
