"""Legal Assistant Routes

POST /api/assistant/ask streams newline-delimited JSON events:
  {"type": "chunk", "text": ...}        zero or more, in order
  {"type": "done", "answer": ..., "sources": [...], ...}
  {"type": "error", "error_code": ..., "message": ..., "partial_answer": ...}

The AI query is checked before streaming and committed once, after the
answer completed. A failed stream is never charged.
"""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from typing import Any, AsyncIterator, Dict
import asyncio
import json
import logging
import uuid

from legallylegit import config
from legallylegit.errors import AssistantFailure
from legallylegit.models.assistant import AskQuestionRequest
from legallylegit.models.profile import EntitlementAction, UserSession
from legallylegit.routes.auth import get_current_session
from legallylegit.routes.errors import entitlement_exhausted
from legallylegit.services.entitlement_service import entitlement_service
from legallylegit.services.legal_assistant import legal_assistant_client
from utils.rate_limiter import rate_limiter

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/assistant", tags=["Legal Assistant"])

_END = object()


def _event(event_type: str, **payload: Any) -> str:
    return json.dumps({"type": event_type, **payload}) + "\n"


async def stream_answer(email: str, question: str, request_id: str) -> AsyncIterator[str]:
    queue: asyncio.Queue = asyncio.Queue()
    
    async def on_chunk(text: str) -> None:
        await queue.put(text)
    
    async def run():
        try:
            return await legal_assistant_client.ask(question, on_chunk, request_id=request_id)
        finally:
            queue.put_nowait(_END)
    
    task = asyncio.ensure_future(run())
    try:
        while True:
            item = await queue.get()
            if item is _END:
                break
            yield _event("chunk", text=item)
        
        try:
            response = await task
        except AssistantFailure as e:
            yield _event(
                "error",
                error_code=e.error_code,
                message=e.message,
                partial_answer=e.partial_answer,
            )
            return
        
        profile, exhausted = await entitlement_service.commit(
            email,
            EntitlementAction.AI_QUERY,
            reference_id=request_id,
            reference_type="assistant",
        )
        if exhausted:
            logger.warning(f"[{request_id}] Answer delivered but query commit was refused for {email}")
        
        done: Dict[str, Any] = {
            "answer": response.answer,
            "sources": [s.model_dump() for s in response.sources],
            "subscription_plan": profile.subscription_plan.value,
            "available_ai_queries": profile.available_ai_queries,
        }
        yield _event("done", **done)
    finally:
        if not task.done():
            logger.info(f"[{request_id}] Client went away; cancelling assistant stream")
            legal_assistant_client.cancel(request_id)
            task.cancel()


@router.post("/ask")
async def ask_question(
    request: AskQuestionRequest,
    session: UserSession = Depends(get_current_session),
):
    # Exhausted users are sent to pricing without spending a rate-limit slot
    _, exhausted = await entitlement_service.check(session.email, EntitlementAction.AI_QUERY)
    if exhausted:
        raise entitlement_exhausted(exhausted)
    
    allowed, error_msg = await rate_limiter.check_rate_limit(
        key=f"assistant:{session.email}",
        max_attempts=config.ASSISTANT_MAX_QUESTIONS,
        window_minutes=config.ASSISTANT_WINDOW_MINUTES,
    )
    if not allowed:
        raise HTTPException(status_code=429, detail={"error_code": "RATE_LIMITED", "message": error_msg})
    
    request_id = f"ask-{uuid.uuid4().hex[:12]}"
    return StreamingResponse(
        stream_answer(session.email, request.question, request_id),
        media_type="application/x-ndjson",
    )
