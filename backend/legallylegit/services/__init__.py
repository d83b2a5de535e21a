"""Legally Legit Services"""

from .entitlement_ledger import EntitlementLedger, entitlement_ledger
from .entitlement_service import EntitlementService, ProfileNotFound, entitlement_service
from .session_store import SessionStore, session_store
from .document_generation import DocumentGenerationClient, document_generation_client
from .legal_assistant import LegalAssistantClient, SourceCollector, legal_assistant_client
from .quiz_engine import QuizEngine, classify_quiz_score, run_quiz
from .document_service import DocumentService, DocumentNotFound, document_service
from .purchase_service import PurchaseService, purchase_service
from .newsletter_service import NewsletterService, newsletter_service
from .auth_service import AuthService, auth_service

__all__ = [
    "EntitlementLedger",
    "entitlement_ledger",
    "EntitlementService",
    "ProfileNotFound",
    "entitlement_service",
    "SessionStore",
    "session_store",
    "DocumentGenerationClient",
    "document_generation_client",
    "LegalAssistantClient",
    "SourceCollector",
    "legal_assistant_client",
    "QuizEngine",
    "classify_quiz_score",
    "run_quiz",
    "DocumentService",
    "DocumentNotFound",
    "document_service",
    "PurchaseService",
    "purchase_service",
    "NewsletterService",
    "newsletter_service",
    "AuthService",
    "auth_service",
]
