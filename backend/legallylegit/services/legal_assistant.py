"""Streaming Legal Assistant Client

Asks a web-search-grounded question and streams the answer back chunk by
chunk. The returned answer is always the exact concatenation of the chunks
handed to the caller's callback.

Grounding metadata may arrive on any chunk, in partial batches; sources are
collected across the whole stream and de-duplicated by uri at the end
(first occurrence wins).
"""

from typing import Any, Awaitable, Callable, Dict, List, Optional, Union
import asyncio
import inspect
import logging
import uuid

import httpx
from google.genai import errors as genai_errors
from google.genai import types

from legallylegit import config
from legallylegit.errors import AssistantFailure
from legallylegit.models.assistant import AssistantResponse, GroundingSource
from utils.llm_chat import get_genai_client, grounding_chunks

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[str], Union[None, Awaitable[None]]]

SYSTEM_INSTRUCTION = (
    "You are Legally Legit's assistant for Australian small business owners. "
    "Answer questions about Australian business law (employment, contracts, privacy, "
    "consumer law and company obligations) clearly and practically. "
    "Use Google Search to ground every answer in current, authoritative Australian sources "
    "such as legislation.gov.au, fairwork.gov.au, oaic.gov.au and asic.gov.au. "
    "Format the answer in Markdown. "
    "Finish with a short reminder that this is general information, not legal advice."
)

UNAVAILABLE_MESSAGE = "The legal assistant is temporarily unavailable. Please try again."


def _field(record: Any, name: str) -> Any:
    if isinstance(record, dict):
        return record.get(name)
    return getattr(record, name, None)


class SourceCollector:
    """Accumulates grounding batches across a stream."""

    def __init__(self):
        self._seen: Dict[str, GroundingSource] = {}

    def add_batch(self, batch) -> None:
        for record in batch or []:
            web = _field(record, "web")
            if web is None:
                continue
            uri = _field(web, "uri")
            title = _field(web, "title")
            if not uri or not title:
                continue
            if uri not in self._seen:
                self._seen[uri] = GroundingSource(uri=uri, title=title)

    def sources(self) -> List[GroundingSource]:
        return list(self._seen.values())


class LegalAssistantClient:
    """Gemini streaming client with Google Search grounding."""

    def __init__(self, genai_client: Any = None, model: Optional[str] = None, timeout: Optional[float] = None):
        self._genai_client = genai_client
        self.model = model or config.LLM_MODEL
        self.timeout = timeout or config.LLM_TIMEOUT_SECONDS
        self._inflight: Dict[str, asyncio.Task] = {}

    def _get_client(self):
        if self._genai_client is None:
            try:
                self._genai_client = get_genai_client()
            except ValueError as e:
                raise AssistantFailure("The legal assistant is not configured.", cause=e) from e
        return self._genai_client

    def _build_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION,
            tools=[types.Tool(google_search=types.GoogleSearch())],
            temperature=config.ASSISTANT_TEMPERATURE,
        )

    async def ask(
        self,
        question: str,
        on_chunk: ChunkCallback,
        request_id: Optional[str] = None,
    ) -> AssistantResponse:
        """Stream an answer to ``question``.

        ``on_chunk`` may be a plain function or a coroutine function; it is
        called once per non-empty text fragment, in order.
        """
        request_id = request_id or f"ask-{uuid.uuid4().hex[:12]}"
        client = self._get_client()
        delivered: List[str] = []
        collector = SourceCollector()

        async def consume() -> None:
            stream = await client.aio.models.generate_content_stream(
                model=self.model,
                contents=question,
                config=self._build_config(),
            )
            async for chunk in stream:
                collector.add_batch(grounding_chunks(chunk))
                text = getattr(chunk, "text", None)
                if not text:
                    continue
                delivered.append(text)
                result = on_chunk(text)
                if inspect.isawaitable(result):
                    await result

        logger.info(f"[{request_id}] Assistant question received ({len(question)} chars)")
        task = asyncio.ensure_future(consume())
        self._inflight[request_id] = task
        try:
            await asyncio.wait_for(task, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"[{request_id}] Assistant stream timed out after {self.timeout}s")
            raise AssistantFailure(UNAVAILABLE_MESSAGE, partial_answer="".join(delivered), cause=e) from e
        except (genai_errors.APIError, httpx.HTTPError, OSError) as e:
            logger.error(f"[{request_id}] Assistant stream failed after {len(delivered)} chunk(s): {e}")
            raise AssistantFailure(UNAVAILABLE_MESSAGE, partial_answer="".join(delivered), cause=e) from e
        except Exception as e:
            # Other SDK transports (e.g. aiohttp) raise their own error types
            logger.error(
                f"[{request_id}] Assistant stream failed after {len(delivered)} chunk(s) "
                f"({type(e).__name__}): {e}"
            )
            raise AssistantFailure(UNAVAILABLE_MESSAGE, partial_answer="".join(delivered), cause=e) from e
        finally:
            self._inflight.pop(request_id, None)

        response = AssistantResponse(answer="".join(delivered), sources=collector.sources())
        logger.info(
            f"[{request_id}] Assistant answered in {len(delivered)} chunk(s) "
            f"with {len(response.sources)} source(s)"
        )
        return response

    def cancel(self, request_id: str) -> bool:
        """Best-effort abort of an in-flight stream."""
        task = self._inflight.get(request_id)
        if task is None or task.done():
            return False
        return task.cancel()


# Global client instance
legal_assistant_client = LegalAssistantClient()
