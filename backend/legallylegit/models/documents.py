"""Generated and Saved Document Models

A GeneratedDocument is the immutable result of one generation call. Saving
promotes it to a SavedDocument owned by the user's profile.
"""

from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime, timezone
import uuid

from legallylegit.models.risk import RiskAnalysis


class GeneratedDocument(BaseModel):
    """Body text + risk analysis + the form snapshot that produced them.

    Never mutated; regenerating yields a new instance.
    """
    generation_id: str = Field(default_factory=lambda: f"GEN-{uuid.uuid4().hex[:12].upper()}")
    template_id: str
    jurisdiction: str
    document_text: str
    risk_analysis: RiskAnalysis
    form_data: Dict[str, str] = Field(default_factory=dict)
    optional_clause_ids: List[str] = Field(default_factory=list)

    ai_model_used: Optional[str] = None
    generation_time_ms: Optional[int] = None
    generated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"extra": "ignore", "frozen": True}


class SavedDocument(BaseModel):
    """Persisted document.

    Mutated only by edit-and-resave (body/analysis replaced, identifier kept)
    or by the downloaded flag transition.
    """
    document_id: str = Field(default_factory=lambda: f"LLD-{uuid.uuid4().hex[:12].upper()}")
    template_id: str
    template_title: str
    jurisdiction: str
    form_data: Dict[str, str] = Field(default_factory=dict)
    document_text: str
    risk_analysis: RiskAnalysis
    generation_id: Optional[str] = None

    version: str = "1.0"
    downloaded: bool = False

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"extra": "ignore"}

    @property
    def download_filename(self) -> str:
        return f"{'-'.join(self.template_title.split())}-v{self.version}.md"


class SavedDocumentList(BaseModel):
    """Whole-list snapshot of a user's saved documents"""
    documents: List[SavedDocument] = Field(default_factory=list)

    def find(self, document_id: str) -> Optional[SavedDocument]:
        return next((d for d in self.documents if d.document_id == document_id), None)


def next_version(version: str) -> str:
    """Bump the minor part of a "major.minor" version tag."""
    major, _, minor = version.partition(".")
    try:
        return f"{int(major)}.{int(minor or 0) + 1}"
    except ValueError:
        return "1.0"
