"""Document Service

Generate -> save -> download lifecycle for a user's documents.

Generation is not charged. The first save of a new document id consumes a
document slot on the free tier; resaving an existing id never does.
Downloads are gated per document: once on the free tier, unlimited on pro.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple
import logging

from legallylegit.errors import FormValidationError, UnknownTemplateError
from legallylegit.models.documents import (
    GeneratedDocument,
    SavedDocument,
    SavedDocumentList,
    next_version,
)
from legallylegit.models.profile import EntitlementAction, EntitlementExhausted
from legallylegit.models.templates import (
    JURISDICTIONS,
    OptionalClause,
    Template,
    get_template,
    validate_form_data,
)
from legallylegit.services.document_generation import document_generation_client
from legallylegit.services.entitlement_service import entitlement_service
from legallylegit.services.session_store import documents_key, generation_key, session_store

logger = logging.getLogger(__name__)


class DocumentNotFound(LookupError):
    pass


def resolve_request(
    template_id: str,
    form_data: Dict[str, str],
    jurisdiction: str,
    clause_ids: Sequence[str] = (),
) -> Tuple[Template, List[OptionalClause]]:
    """Validate a generation request before any network call.

    Returns the template and the selected clauses in selection order.
    """
    template = get_template(template_id)
    if template is None:
        raise UnknownTemplateError(f"Template '{template_id}' not found")

    errors = validate_form_data(template, form_data)
    if jurisdiction not in JURISDICTIONS:
        errors["jurisdiction"] = "Please select a valid Australian state or territory."

    clauses: List[OptionalClause] = []
    seen = set()
    for clause_id in clause_ids:
        if clause_id in seen:
            continue
        seen.add(clause_id)
        clause = template.get_clause(clause_id)
        if clause is None:
            errors[f"optional_clauses.{clause_id}"] = f"{clause_id} is not available for {template.title}."
            continue
        clauses.append(clause)

    if errors:
        raise FormValidationError(errors)
    return template, clauses


class DocumentService:
    """Orchestrates generation, persistence and entitlements for documents."""

    def __init__(self, store=None, generator=None, entitlements=None):
        self.store = store or session_store
        self.generator = generator or document_generation_client
        self.entitlements = entitlements or entitlement_service

    async def generate(
        self,
        email: str,
        template_id: str,
        form_data: Dict[str, str],
        jurisdiction: str,
        clause_ids: Sequence[str] = (),
        request_id: Optional[str] = None,
    ) -> GeneratedDocument:
        template, clauses = resolve_request(template_id, form_data, jurisdiction, clause_ids)
        generated = await self.generator.generate(
            template, form_data, jurisdiction, clauses, request_id=request_id
        )
        await self.store.set(generation_key(email, generated.generation_id), generated)
        return generated

    async def get_generation(self, email: str, generation_id: str) -> Optional[GeneratedDocument]:
        return await self.store.get(generation_key(email, generation_id), GeneratedDocument)

    async def list_documents(self, email: str) -> List[SavedDocument]:
        snapshot = await self.store.get(documents_key(email), SavedDocumentList)
        return snapshot.documents if snapshot else []

    async def get_document(self, email: str, document_id: str) -> Optional[SavedDocument]:
        snapshot = await self.store.get(documents_key(email), SavedDocumentList)
        return snapshot.find(document_id) if snapshot else None

    async def save(
        self,
        email: str,
        generation_id: str,
        document_id: Optional[str] = None,
    ) -> Tuple[Optional[SavedDocument], Optional[EntitlementExhausted]]:
        """Save a generated draft as a new document, or over an existing one.

        Returns (document, None) on success and (None, exhausted) when the
        free tier has no document slot for a new save.
        """
        generated = await self.get_generation(email, generation_id)
        if generated is None:
            raise DocumentNotFound(f"Generation {generation_id} not found")
        template = get_template(generated.template_id)
        if template is None:
            raise UnknownTemplateError(f"Template '{generated.template_id}' not found")

        async with self.entitlements.user_lock(email):
            snapshot = await self.store.get(documents_key(email), SavedDocumentList) or SavedDocumentList()
            existing = snapshot.find(document_id) if document_id else None
            if document_id and existing is None:
                raise DocumentNotFound(f"Document {document_id} not found")

            now = datetime.now(timezone.utc)
            if existing:
                document = existing.model_copy(update={
                    "form_data": dict(generated.form_data),
                    "jurisdiction": generated.jurisdiction,
                    "document_text": generated.document_text,
                    "risk_analysis": generated.risk_analysis,
                    "generation_id": generated.generation_id,
                    "version": next_version(existing.version),
                    "updated_at": now,
                })
            else:
                document = SavedDocument(
                    template_id=template.template_id,
                    template_title=template.title,
                    jurisdiction=generated.jurisdiction,
                    form_data=dict(generated.form_data),
                    document_text=generated.document_text,
                    risk_analysis=generated.risk_analysis,
                    generation_id=generated.generation_id,
                )

            _, exhausted = await self.entitlements.check(
                email, EntitlementAction.DOCUMENT_SAVE, already_saved=existing is not None
            )
            if exhausted:
                return None, exhausted

            if existing:
                documents = [document if d.document_id == document.document_id else d for d in snapshot.documents]
            else:
                documents = [document] + snapshot.documents
            await self.store.set(documents_key(email), SavedDocumentList(documents=documents))

            # Commit only after the save is durable
            _, exhausted = await self.entitlements.commit_held(
                email,
                EntitlementAction.DOCUMENT_SAVE,
                reference_id=document.document_id,
                reference_type="document",
                already_saved=existing is not None,
            )
            if exhausted:
                logger.error(f"Document {document.document_id} saved but slot commit failed for {email}")

        logger.info(
            f"{'Resaved' if existing else 'Saved'} document {document.document_id} "
            f"v{document.version} for {email}"
        )
        return document, None

    async def download(
        self,
        email: str,
        document_id: str,
    ) -> Tuple[Optional[SavedDocument], Optional[EntitlementExhausted]]:
        """Release a document for download.

        Returns the document (with ``downloaded`` set on the free tier) or
        the exhaustion when a free-tier document was already downloaded.
        """
        async with self.entitlements.user_lock(email):
            snapshot = await self.store.get(documents_key(email), SavedDocumentList)
            document = snapshot.find(document_id) if snapshot else None
            if document is None:
                raise DocumentNotFound(f"Document {document_id} not found")

            profile, exhausted = await self.entitlements.check(
                email, EntitlementAction.DOCUMENT_DOWNLOAD, document=document
            )
            if exhausted:
                return None, exhausted

            released = self.entitlements.ledger.mark_downloaded(profile, document)
            if released is not document:
                documents = [released if d.document_id == document_id else d for d in snapshot.documents]
                await self.store.set(documents_key(email), SavedDocumentList(documents=documents))

            await self.entitlements.commit_held(
                email,
                EntitlementAction.DOCUMENT_DOWNLOAD,
                reference_id=document_id,
                reference_type="document",
                document=document,
            )

        logger.info(f"Document {document_id} downloaded by {email} (plan={profile.subscription_plan.value})")
        return released, None


# Global service instance
document_service = DocumentService()
