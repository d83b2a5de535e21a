"""Entitlement Ledger

Pure check-and-decrement rules over a UserProfile. No I/O: the caller checks
before the gated action and commits only after the action succeeded.

Rules:
- pro tier: every action permitted, counters never touched
- free tier aiQuery: needs available_ai_queries > 0, consumes 1
- free tier documentSave: needs purchased_doc_slots > 0, consumes 1 on the
  first save of a document id only; resaves are free
- documentDownload: gated per document; a free-tier document downloads once
"""

from datetime import datetime, timezone
from typing import Optional, Tuple
import logging

from legallylegit.errors import InvalidProfileState
from legallylegit.models.documents import SavedDocument
from legallylegit.models.products import Product
from legallylegit.models.profile import (
    EntitlementAction,
    EntitlementExhausted,
    SubscriptionTier,
    UserProfile,
)

logger = logging.getLogger(__name__)


EXHAUSTED_MESSAGES = {
    EntitlementAction.AI_QUERY: "You have run out of AI assistant queries. Please upgrade for more.",
    EntitlementAction.DOCUMENT_SAVE: "Please upgrade to save documents.",
    EntitlementAction.DOCUMENT_DOWNLOAD: (
        "You have already downloaded this document. Please upgrade to Pro for unlimited downloads."
    ),
}


class EntitlementLedger:
    """Stateless entitlement rules."""

    def validate_profile(self, profile: UserProfile) -> None:
        if profile.available_ai_queries < 0 or profile.purchased_doc_slots < 0:
            raise InvalidProfileState(
                f"Negative counters for {profile.email}: "
                f"queries={profile.available_ai_queries} slots={profile.purchased_doc_slots}"
            )

    def check(
        self,
        profile: UserProfile,
        action: EntitlementAction,
        *,
        already_saved: bool = False,
        document: Optional[SavedDocument] = None,
    ) -> Optional[EntitlementExhausted]:
        """Return None when the action is permitted, else the exhaustion signal.

        ``already_saved`` marks a resave of a persisted document id.
        ``document`` is the saved document a download targets.
        """
        self.validate_profile(profile)

        if action == EntitlementAction.DOCUMENT_DOWNLOAD and document is None:
            raise ValueError("documentDownload is gated per document; pass the document")

        if profile.subscription_plan == SubscriptionTier.PRO:
            return None

        permitted = True
        if action == EntitlementAction.AI_QUERY:
            permitted = profile.available_ai_queries > 0
        elif action == EntitlementAction.DOCUMENT_SAVE:
            permitted = already_saved or profile.purchased_doc_slots > 0
        elif action == EntitlementAction.DOCUMENT_DOWNLOAD:
            permitted = not document.downloaded

        if permitted:
            return None
        return EntitlementExhausted(action=action, message=EXHAUSTED_MESSAGES[action])

    def can_consume(
        self,
        profile: UserProfile,
        action: EntitlementAction,
        *,
        already_saved: bool = False,
        document: Optional[SavedDocument] = None,
    ) -> bool:
        return self.check(profile, action, already_saved=already_saved, document=document) is None

    def consume(
        self,
        profile: UserProfile,
        action: EntitlementAction,
        *,
        already_saved: bool = False,
        document: Optional[SavedDocument] = None,
    ) -> Tuple[UserProfile, Optional[EntitlementExhausted]]:
        """Apply the action to the profile.

        Returns (updated_profile, None) on success or (profile, exhausted)
        unchanged when the entitlement is exhausted.
        """
        exhausted = self.check(profile, action, already_saved=already_saved, document=document)
        if exhausted:
            return profile, exhausted

        if profile.subscription_plan == SubscriptionTier.PRO:
            return profile, None

        update = {}
        if action == EntitlementAction.AI_QUERY:
            update["available_ai_queries"] = profile.available_ai_queries - 1
        elif action == EntitlementAction.DOCUMENT_SAVE and not already_saved:
            update["purchased_doc_slots"] = profile.purchased_doc_slots - 1

        if not update:
            return profile, None
        update["updated_at"] = datetime.now(timezone.utc)
        return profile.model_copy(update=update), None

    def mark_downloaded(self, profile: UserProfile, document: SavedDocument) -> SavedDocument:
        """Flag a document as downloaded. Pro downloads leave the flag alone."""
        if profile.subscription_plan == SubscriptionTier.PRO or document.downloaded:
            return document
        return document.model_copy(update={"downloaded": True, "updated_at": datetime.now(timezone.utc)})

    def apply_purchase(self, profile: UserProfile, product: Product) -> UserProfile:
        """Grant the entitlements of a successfully paid product."""
        self.validate_profile(profile)
        update = {"updated_at": datetime.now(timezone.utc)}
        if product.upgrades_to_pro:
            update["subscription_plan"] = SubscriptionTier.PRO
        if product.grant_doc_slots:
            update["purchased_doc_slots"] = profile.purchased_doc_slots + product.grant_doc_slots
        if product.grant_ai_queries:
            update["available_ai_queries"] = profile.available_ai_queries + product.grant_ai_queries
        return profile.model_copy(update=update)

    def apply_downgrade(self, profile: UserProfile) -> UserProfile:
        """Return to the free tier; purchased counters are kept."""
        if profile.subscription_plan == SubscriptionTier.FREE:
            return profile
        return profile.model_copy(update={
            "subscription_plan": SubscriptionTier.FREE,
            "updated_at": datetime.now(timezone.utc),
        })


# Global ledger instance
entitlement_ledger = EntitlementLedger()
