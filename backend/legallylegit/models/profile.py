"""User Profile and Entitlement Models

Single user entity with an embedded entitlement wallet. Created on first
email capture, never deleted; logout only drops the session reference.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime, timezone
from enum import Enum
import uuid


class SubscriptionTier(str, Enum):
    FREE = "free"
    PRO = "pro"


class EntitlementAction(str, Enum):
    """Actions gated by the entitlement ledger"""
    AI_QUERY = "aiQuery"
    DOCUMENT_SAVE = "documentSave"
    DOCUMENT_DOWNLOAD = "documentDownload"


class UserProfile(BaseModel):
    """User with plan tier and credit counters.

    Counters are meaningless under the pro tier. Negative counters are a
    malformed state rejected by the ledger, so they are not constrained here.
    """
    email: EmailStr
    subscription_plan: SubscriptionTier = SubscriptionTier.FREE
    available_ai_queries: int = 0
    purchased_doc_slots: int = 0

    stripe_customer_id: Optional[str] = None
    newsletter_subscribed: bool = False

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"extra": "ignore"}

    @property
    def is_pro(self) -> bool:
        return self.subscription_plan == SubscriptionTier.PRO


class EntitlementExhausted(BaseModel):
    """Normal, user-facing exhaustion of an entitlement.

    Returned (never raised) by the ledger; recoverable by upgrading.
    """
    action: EntitlementAction
    message: str
    upgrade_url: str = "/pricing"

    model_config = {"frozen": True}


class EntitlementTransactionType(str, Enum):
    CONSUME = "CONSUME"
    GRANT = "GRANT"
    UPGRADE = "UPGRADE"


class EntitlementTransaction(BaseModel):
    """Journal record of every committed entitlement movement"""
    transaction_id: str = Field(default_factory=lambda: f"ETX-{uuid.uuid4().hex[:12].upper()}")
    email: str
    transaction_type: EntitlementTransactionType
    action: Optional[EntitlementAction] = None

    # Positive for grants, negative for consumption, zero when uncounted (pro)
    ai_queries_delta: int = 0
    doc_slots_delta: int = 0
    ai_queries_after: int
    doc_slots_after: int

    reference_id: Optional[str] = None  # document_id, checkout session id, ...
    reference_type: Optional[str] = None
    description: str

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    model_config = {"extra": "ignore"}


class UserSession(BaseModel):
    """Email-capture session reference"""
    session_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    email: str
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
