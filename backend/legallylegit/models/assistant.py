"""Legal Assistant Models"""

from pydantic import BaseModel, Field
from typing import List


class GroundingSource(BaseModel):
    """Web citation consulted for an answer"""
    uri: str
    title: str

    model_config = {"frozen": True}


class AssistantResponse(BaseModel):
    answer: str
    sources: List[GroundingSource] = Field(default_factory=list)


class AskQuestionRequest(BaseModel):
    question: str = Field(min_length=1, max_length=2000)
