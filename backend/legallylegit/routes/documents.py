"""Legally Legit Document Routes

Endpoints:
- POST /api/documents/generate - Generate a draft (not charged)
- POST /api/documents - Save a draft as a new document, or over an existing one
- GET /api/documents - Saved documents
- GET /api/documents/{id} - Saved document details
- GET /api/documents/{id}/download - Markdown download (once on free tier)
"""

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field
from typing import Dict, List, Optional
import logging

from legallylegit.errors import LegallyLegitError
from legallylegit.models.documents import GeneratedDocument, SavedDocument
from legallylegit.models.profile import UserSession
from legallylegit.routes.auth import get_current_session
from legallylegit.routes.errors import entitlement_exhausted, not_found, to_http_exception
from legallylegit.services.document_service import DocumentNotFound, document_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/documents", tags=["Documents"])


class GenerateRequest(BaseModel):
    template_id: str
    jurisdiction: str
    form_data: Dict[str, str] = Field(default_factory=dict)
    optional_clauses: List[str] = Field(default_factory=list)


class SaveRequest(BaseModel):
    generation_id: str
    document_id: Optional[str] = None


@router.post("/generate", response_model=GeneratedDocument)
async def generate_document(
    request: GenerateRequest,
    session: UserSession = Depends(get_current_session),
):
    """Generate the document and its risk analysis."""
    try:
        return await document_service.generate(
            session.email,
            request.template_id,
            request.form_data,
            request.jurisdiction,
            request.optional_clauses,
        )
    except LegallyLegitError as e:
        logger.warning(f"Generation for {session.email} failed: {e.error_code} {e.message}")
        raise to_http_exception(e)


@router.post("", response_model=SavedDocument)
async def save_document(
    request: SaveRequest,
    session: UserSession = Depends(get_current_session),
):
    """Save a generated draft.

    First save of a new document uses a document slot on the free tier;
    passing ``document_id`` resaves an existing document without charge.
    """
    try:
        document, exhausted = await document_service.save(
            session.email, request.generation_id, request.document_id
        )
    except DocumentNotFound as e:
        raise not_found(str(e))
    except LegallyLegitError as e:
        raise to_http_exception(e)
    if exhausted:
        raise entitlement_exhausted(exhausted)
    return document


@router.get("", response_model=List[SavedDocument])
async def list_documents(session: UserSession = Depends(get_current_session)):
    return await document_service.list_documents(session.email)


@router.get("/{document_id}", response_model=SavedDocument)
async def get_document(document_id: str, session: UserSession = Depends(get_current_session)):
    document = await document_service.get_document(session.email, document_id)
    if not document:
        raise not_found(f"Document {document_id} not found")
    return document


@router.get("/{document_id}/download")
async def download_document(document_id: str, session: UserSession = Depends(get_current_session)):
    try:
        document, exhausted = await document_service.download(session.email, document_id)
    except DocumentNotFound as e:
        raise not_found(str(e))
    if exhausted:
        raise entitlement_exhausted(exhausted)
    
    return PlainTextResponse(
        content=document.document_text,
        media_type="text/markdown",
        headers={"Content-Disposition": f'attachment; filename="{document.download_filename}"'},
    )
