"""Document Generation Client

Schema-constrained generation of a legal document plus its risk analysis.

The request carries the template, jurisdiction, form snapshot and the
selected optional clauses (in selection order). The response must be a JSON
object with exactly two members, ``document_text`` and ``risk_analysis``;
anything else is a GenerationFailure. Transport problems (API errors,
network errors, timeouts) are ServiceUnavailable.

This client never touches entitlements or persistence.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Sequence
import asyncio
import json
import logging
import uuid

import httpx
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import BaseModel, Field, ValidationError

from legallylegit import config
from legallylegit.errors import GenerationFailure, ServiceUnavailable
from legallylegit.models.documents import GeneratedDocument
from legallylegit.models.risk import RiskAnalysis, RiskLevel
from legallylegit.models.templates import OptionalClause, Template
from utils.llm_chat import get_genai_client

logger = logging.getLogger(__name__)


SYSTEM_INSTRUCTION = """You are a senior Australian commercial lawyer drafting documents for small and medium businesses.

**Drafting rules**
- Comply with current Commonwealth, state and territory law for the document type and the stated jurisdiction (for example the Fair Work Act 2009 and NES, Australian Consumer Law, Corporations Act 2001, Privacy Act 1988 and the APPs).
- Write in plain English that a business owner can follow without losing legal precision.
- Use every value the user supplied. Where information is missing, draft a protective default and insert a placeholder of the form **[ACTION: Insert specific details here]**.
- When optional clauses are supplied, integrate each one where it logically belongs in the document, keeping the order in which they are listed.

**Risk analysis**
- Score the legal risk of the arrangement described by the user data from 0 (low) to 100 (critical).
- Name concrete risks (for example sham contracting, underpayment against a Modern Award, missing APP disclosures) with short reasoning tied to the data.
- Return at least one breakdown item whenever the risk is High or Critical.

**Output**
- `document_text` is the complete document as clean Markdown: `##` headings, `*` list items, `**bold**`.
- Respond with a single JSON object that matches the provided schema and nothing else."""


RISK_ANALYSIS_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "score": types.Schema(
            type=types.Type.INTEGER,
            minimum=0,
            maximum=100,
            description="Risk score from 0 (low risk) to 100 (critical risk).",
        ),
        "level": types.Schema(
            type=types.Type.STRING,
            enum=[level.value for level in RiskLevel],
            description="One of Low, Medium, High, Critical.",
        ),
        "summary": types.Schema(
            type=types.Type.STRING,
            description="One sentence summarising the primary legal risk.",
        ),
        "breakdown": types.Schema(
            type=types.Type.ARRAY,
            description="Specific risks identified in the user data.",
            items=types.Schema(
                type=types.Type.OBJECT,
                properties={
                    "title": types.Schema(type=types.Type.STRING, description="Risk area, e.g. 'Sham Contracting'."),
                    "reasoning": types.Schema(type=types.Type.STRING, description="Why this is a risk for this data."),
                },
                required=["title", "reasoning"],
            ),
        ),
    },
    required=["score", "level", "summary", "breakdown"],
)

RESPONSE_SCHEMA = types.Schema(
    type=types.Type.OBJECT,
    properties={
        "document_text": types.Schema(
            type=types.Type.STRING,
            description="The full legal document in Markdown.",
        ),
        "risk_analysis": RISK_ANALYSIS_SCHEMA,
    },
    required=["document_text", "risk_analysis"],
    property_ordering=["document_text", "risk_analysis"],
)


class GenerationPayload(BaseModel):
    """Exact response shape required from the model"""
    document_text: str = Field(min_length=1)
    risk_analysis: RiskAnalysis

    model_config = {"extra": "forbid"}


def _strip_code_fence(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("```"):
        stripped = stripped.split("\n", 1)[1] if "\n" in stripped else ""
        if stripped.rstrip().endswith("```"):
            stripped = stripped.rstrip()[:-3]
    return stripped.strip()


def parse_generation_payload(raw: Optional[str]) -> GenerationPayload:
    """Parse and validate the model's structured output."""
    if raw is None or not raw.strip():
        raise GenerationFailure("The AI service returned an empty response. Please try again.")
    try:
        data = json.loads(_strip_code_fence(raw))
    except json.JSONDecodeError as e:
        raise GenerationFailure("The AI service returned an unreadable response. Please try again.") from e
    if not isinstance(data, dict):
        raise GenerationFailure("The AI service returned an unexpected response. Please try again.")
    try:
        return GenerationPayload.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'response'}: {err['msg']}" for err in e.errors()
        )
        logger.warning(f"Generation payload rejected: {problems}")
        raise GenerationFailure("The AI service returned an incomplete document. Please try again.") from e


def build_generation_prompt(
    template: Template,
    form_data: Mapping[str, str],
    jurisdiction: str,
    optional_clauses: Sequence[OptionalClause],
) -> str:
    """User content for a generation request. Clause order is kept."""
    parts = [
        f"**Document to Generate:** {template.title}",
        f"**Jurisdiction:** {jurisdiction}, Australia",
    ]
    if template.compliance_requirements:
        parts.append(f"**Relevant Legislation:** {', '.join(template.compliance_requirements)}")
    parts.append(f"\n**User-provided Data:**\n{json.dumps(dict(form_data), indent=2)}")
    
    if optional_clauses:
        clause_text = "".join(f"\n### {c.title}\n{c.content}\n" for c in optional_clauses)
        parts.append(f"\n**Optional Clauses to Include (in this order):**{clause_text}")
    else:
        parts.append("\n**Optional Clauses to Include:** None.")
    
    parts.append(
        "\n**Task:** Draft the document and perform the risk analysis for the data above, "
        "following all drafting rules."
    )
    return "\n".join(parts)


class DocumentGenerationClient:
    """Gemini-backed document and risk generation."""
    
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
                raise ServiceUnavailable("The AI service is not configured.") from e
        return self._genai_client
    
    def _build_config(self) -> types.GenerateContentConfig:
        return types.GenerateContentConfig(
            system_instruction=SYSTEM_INSTRUCTION,
            response_mime_type="application/json",
            response_schema=RESPONSE_SCHEMA,
            temperature=config.GENERATION_TEMPERATURE,
        )
    
    async def generate(
        self,
        template: Template,
        form_data: Mapping[str, str],
        jurisdiction: str,
        optional_clauses: Sequence[OptionalClause] = (),
        request_id: Optional[str] = None,
    ) -> GeneratedDocument:
        """Generate a document and its risk analysis.

        Field completeness is the caller's job; only the response shape is
        validated here.
        """
        request_id = request_id or f"gen-{uuid.uuid4().hex[:12]}"
        client = self._get_client()
        snapshot = {key: str(value) for key, value in form_data.items()}
        prompt = build_generation_prompt(template, snapshot, jurisdiction, optional_clauses)
        start_time = datetime.now(timezone.utc)
        
        logger.info(
            f"[{request_id}] Generating {template.template_id} for {jurisdiction} "
            f"with {len(optional_clauses)} optional clause(s)"
        )
        
        task = asyncio.ensure_future(
            client.aio.models.generate_content(
                model=self.model,
                contents=prompt,
                config=self._build_config(),
            )
        )
        self._inflight[request_id] = task
        try:
            response = await asyncio.wait_for(task, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"[{request_id}] Generation timed out after {self.timeout}s")
            raise ServiceUnavailable("The AI service timed out. Please try again.") from e
        except (genai_errors.APIError, httpx.HTTPError, OSError) as e:
            logger.error(f"[{request_id}] Generation transport error: {e}")
            raise ServiceUnavailable(
                "Failed to generate document. The AI service may be temporarily unavailable."
            ) from e
        except Exception as e:
            # Other SDK transports (e.g. aiohttp) raise their own error types
            logger.error(f"[{request_id}] Generation failed ({type(e).__name__}): {e}")
            raise ServiceUnavailable(
                "Failed to generate document. The AI service may be temporarily unavailable."
            ) from e
        finally:
            self._inflight.pop(request_id, None)
        
        payload = parse_generation_payload(getattr(response, "text", None))
        generation_time_ms = int((datetime.now(timezone.utc) - start_time).total_seconds() * 1000)
        
        document = GeneratedDocument(
            template_id=template.template_id,
            jurisdiction=jurisdiction,
            document_text=payload.document_text,
            risk_analysis=payload.risk_analysis,
            form_data=snapshot,
            optional_clause_ids=[c.clause_id for c in optional_clauses],
            ai_model_used=self.model,
            generation_time_ms=generation_time_ms,
        )
        logger.info(
            f"[{request_id}] Generated {document.generation_id} in {generation_time_ms}ms "
            f"(risk {document.risk_analysis.level.value}/{document.risk_analysis.score})"
        )
        return document
    
    def cancel(self, request_id: str) -> bool:
        """Best-effort abort of an in-flight generation."""
        task = self._inflight.get(request_id)
        if task is None or task.done():
            return False
        return task.cancel()


# Global client instance
document_generation_client = DocumentGenerationClient()
