"""
Gemini client access using the Google Gen AI SDK.
Uses LLM_API_KEY from environment (Gemini API key from Google AI Studio).
Both document generation and the streaming assistant go through the async
surface of one shared client.
"""
import logging
from typing import Any, List, Optional

from google import genai

from legallylegit import config

logger = logging.getLogger(__name__)

_client: Optional[genai.Client] = None


def get_genai_client() -> genai.Client:
    """Return the process-wide Gemini client, creating it on first use."""
    global _client
    if _client is None:
        if not config.LLM_API_KEY:
            raise ValueError("LLM_API_KEY not found in environment")
        _client = genai.Client(api_key=config.LLM_API_KEY)
        logger.info(f"Gemini client initialised (model={config.LLM_MODEL})")
    return _client


def reset_genai_client() -> None:
    global _client
    _client = None


def first_candidate(response: Any) -> Optional[Any]:
    """First candidate of a (possibly partial) response, or None."""
    candidates = getattr(response, "candidates", None) or []
    return candidates[0] if candidates else None


def grounding_chunks(response: Any) -> List[Any]:
    """Grounding chunks attached to a response or stream chunk, if any."""
    candidate = first_candidate(response)
    metadata = getattr(candidate, "grounding_metadata", None) if candidate is not None else None
    return list(getattr(metadata, "grounding_chunks", None) or [])
