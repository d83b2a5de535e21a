"""Legally Legit Data Models"""

from .risk import (
    RiskLevel,
    RiskFactor,
    RiskAnalysis,
    level_for_score,
)
from .templates import (
    Template,
    OptionalClause,
    TEMPLATES,
    JURISDICTIONS,
    FIELD_LABELS,
    get_template,
    validate_form_data,
)
from .documents import (
    GeneratedDocument,
    SavedDocument,
    SavedDocumentList,
)
from .profile import (
    UserProfile,
    SubscriptionTier,
    EntitlementAction,
    EntitlementExhausted,
    EntitlementTransaction,
    EntitlementTransactionType,
    UserSession,
)
from .assistant import (
    GroundingSource,
    AssistantResponse,
)
from .quiz import (
    QuizQuestion,
    QuizResult,
    QUIZ_QUESTIONS,
)
from .products import (
    Product,
    PRODUCTS,
    PendingCheckout,
    CheckoutStatus,
    get_product,
)

__all__ = [
    # Risk
    "RiskLevel",
    "RiskFactor",
    "RiskAnalysis",
    "level_for_score",
    # Templates
    "Template",
    "OptionalClause",
    "TEMPLATES",
    "JURISDICTIONS",
    "FIELD_LABELS",
    "get_template",
    "validate_form_data",
    # Documents
    "GeneratedDocument",
    "SavedDocument",
    "SavedDocumentList",
    # Profile / entitlements
    "UserProfile",
    "SubscriptionTier",
    "EntitlementAction",
    "EntitlementExhausted",
    "EntitlementTransaction",
    "EntitlementTransactionType",
    "UserSession",
    # Assistant
    "GroundingSource",
    "AssistantResponse",
    # Quiz
    "QuizQuestion",
    "QuizResult",
    "QUIZ_QUESTIONS",
    # Products
    "Product",
    "PRODUCTS",
    "PendingCheckout",
    "CheckoutStatus",
    "get_product",
]
