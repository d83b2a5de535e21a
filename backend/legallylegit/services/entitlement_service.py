"""Entitlement Service

Persistent orchestration over the entitlement ledger:
- Profile creation on email capture
- Commit of consumed entitlements after the gated action succeeded
- Purchase grants and subscription downgrades
- Transaction journal (every committed movement is recorded)

Saves and purchases are idempotent by reference id, so one logical event is
never charged or granted twice.
"""

from collections import defaultdict
from typing import Dict, Optional, Tuple
import asyncio
import logging

from database import database
from legallylegit import config
from legallylegit.models.documents import SavedDocument
from legallylegit.models.products import Product
from legallylegit.models.profile import (
    EntitlementAction,
    EntitlementExhausted,
    EntitlementTransaction,
    EntitlementTransactionType,
    SubscriptionTier,
    UserProfile,
)
from legallylegit.services.entitlement_ledger import entitlement_ledger
from legallylegit.services.session_store import session_store, profile_key

logger = logging.getLogger(__name__)

TRANSACTIONS_COLLECTION = "legallylegit_entitlement_transactions"

# Actions whose commit is keyed by a reference id and must happen once
_IDEMPOTENT_ACTIONS = {EntitlementAction.DOCUMENT_SAVE}


class ProfileNotFound(LookupError):
    pass


class EntitlementService:
    """Entitlement state for user profiles."""
    
    def __init__(self, store=None, ledger=None):
        self.db = None
        self.store = store or session_store
        self.ledger = ledger or entitlement_ledger
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
    
    def _get_db(self):
        if self.db is None:
            self.db = database.get_db()
        return self.db
    
    def user_lock(self, email: str) -> asyncio.Lock:
        """Lock serialising read-modify-write of one user's snapshots."""
        return self._locks[email.lower()]
    
    async def get_profile(self, email: str) -> Optional[UserProfile]:
        return await self.store.get(profile_key(email), UserProfile)
    
    async def require_profile(self, email: str) -> UserProfile:
        profile = await self.get_profile(email)
        if profile is None:
            raise ProfileNotFound(f"No profile for {email}")
        return profile
    
    async def create_profile(self, email: str, newsletter_subscribed: bool = False) -> Tuple[UserProfile, bool]:
        """Create the free-tier profile on first email capture.

        Returns (profile, created). An existing profile is returned untouched.
        """
        async with self.user_lock(email):
            existing = await self.get_profile(email)
            if existing:
                return existing, False
            
            profile = UserProfile(
                email=email.lower(),
                subscription_plan=SubscriptionTier.FREE,
                available_ai_queries=config.FREE_TIER_AI_QUERIES,
                purchased_doc_slots=config.FREE_TIER_DOC_SLOTS,
                newsletter_subscribed=newsletter_subscribed,
            )
            await self.store.set(profile_key(email), profile)
            logger.info(
                f"Created profile {profile.email} "
                f"(queries={profile.available_ai_queries}, slots={profile.purchased_doc_slots})"
            )
            return profile, True
    
    async def check(
        self,
        email: str,
        action: EntitlementAction,
        *,
        already_saved: bool = False,
        document: Optional[SavedDocument] = None,
    ) -> Tuple[UserProfile, Optional[EntitlementExhausted]]:
        """Advisory check before attempting a gated action."""
        profile = await self.require_profile(email)
        exhausted = self.ledger.check(profile, action, already_saved=already_saved, document=document)
        return profile, exhausted
    
    async def commit(
        self,
        email: str,
        action: EntitlementAction,
        *,
        reference_id: Optional[str] = None,
        reference_type: Optional[str] = None,
        already_saved: bool = False,
        document: Optional[SavedDocument] = None,
    ) -> Tuple[UserProfile, Optional[EntitlementExhausted]]:
        """Commit one consumed entitlement after the action succeeded."""
        async with self.user_lock(email):
            return await self.commit_held(
                email,
                action,
                reference_id=reference_id,
                reference_type=reference_type,
                already_saved=already_saved,
                document=document,
            )
    
    async def commit_held(
        self,
        email: str,
        action: EntitlementAction,
        *,
        reference_id: Optional[str] = None,
        reference_type: Optional[str] = None,
        already_saved: bool = False,
        document: Optional[SavedDocument] = None,
    ) -> Tuple[UserProfile, Optional[EntitlementExhausted]]:
        """Same as commit(); the caller already holds user_lock(email)."""
        profile = await self.require_profile(email)
        
        if action in _IDEMPOTENT_ACTIONS and reference_id:
            if await self._already_committed(email, action, reference_id):
                logger.info(f"{action.value} for {reference_id} already committed for {email}; not charging again")
                return profile, None
        
        updated, exhausted = self.ledger.consume(
            profile, action, already_saved=already_saved, document=document
        )
        if exhausted:
            logger.warning(f"Entitlement exhausted for {email}: {action.value}")
            return profile, exhausted
        
        if updated is not profile:
            await self.store.set(profile_key(email), updated)
        
        await self._record(EntitlementTransaction(
            email=updated.email,
            transaction_type=EntitlementTransactionType.CONSUME,
            action=action,
            ai_queries_delta=updated.available_ai_queries - profile.available_ai_queries,
            doc_slots_delta=updated.purchased_doc_slots - profile.purchased_doc_slots,
            ai_queries_after=updated.available_ai_queries,
            doc_slots_after=updated.purchased_doc_slots,
            reference_id=reference_id,
            reference_type=reference_type,
            description=f"{action.value} ({updated.subscription_plan.value})",
        ))
        
        logger.info(
            f"Committed {action.value} for {email}. "
            f"queries={updated.available_ai_queries} slots={updated.purchased_doc_slots}"
        )
        return updated, None
    
    async def apply_purchase(self, email: str, product: Product, reference_id: str) -> UserProfile:
        """Grant a paid product's entitlements once per payment reference."""
        async with self.user_lock(email):
            profile = await self.require_profile(email)
            
            db = self._get_db()
            existing = await db[TRANSACTIONS_COLLECTION].find_one(
                {
                    "email": profile.email,
                    "transaction_type": {"$in": [
                        EntitlementTransactionType.GRANT.value,
                        EntitlementTransactionType.UPGRADE.value,
                    ]},
                    "reference_id": reference_id,
                },
                {"_id": 0},
            )
            if existing:
                logger.info(f"Purchase {reference_id} already applied for {email}")
                return profile
            
            updated = self.ledger.apply_purchase(profile, product)
            await self.store.set(profile_key(email), updated)
            
            await self._record(EntitlementTransaction(
                email=updated.email,
                transaction_type=(
                    EntitlementTransactionType.UPGRADE if product.upgrades_to_pro
                    else EntitlementTransactionType.GRANT
                ),
                ai_queries_delta=updated.available_ai_queries - profile.available_ai_queries,
                doc_slots_delta=updated.purchased_doc_slots - profile.purchased_doc_slots,
                ai_queries_after=updated.available_ai_queries,
                doc_slots_after=updated.purchased_doc_slots,
                reference_id=reference_id,
                reference_type="stripe_checkout",
                description=f"Purchase: {product.name}",
            ))
            
            logger.info(f"Applied {product.product_id} to {email}: plan={updated.subscription_plan.value}")
            return updated
    
    async def downgrade(self, email: str, reference_id: Optional[str] = None) -> Optional[UserProfile]:
        """Return a cancelled subscriber to the free tier."""
        async with self.user_lock(email):
            profile = await self.get_profile(email)
            if profile is None:
                logger.warning(f"Downgrade for unknown profile {email}")
                return None
            updated = self.ledger.apply_downgrade(profile)
            if updated is not profile:
                await self.store.set(profile_key(email), updated)
                logger.info(f"Downgraded {email} to free tier ({reference_id})")
            return updated
    
    async def set_stripe_customer(self, email: str, customer_id: str) -> None:
        async with self.user_lock(email):
            profile = await self.require_profile(email)
            if profile.stripe_customer_id == customer_id:
                return
            await self.store.set(profile_key(email), profile.model_copy(update={"stripe_customer_id": customer_id}))
    
    async def _already_committed(self, email: str, action: EntitlementAction, reference_id: str) -> bool:
        db = self._get_db()
        existing = await db[TRANSACTIONS_COLLECTION].find_one(
            {"email": email.lower(), "action": action.value, "reference_id": reference_id},
            {"_id": 0, "transaction_id": 1},
        )
        return existing is not None
    
    async def _record(self, transaction: EntitlementTransaction) -> None:
        db = self._get_db()
        await db[TRANSACTIONS_COLLECTION].insert_one(transaction.model_dump())
    
    async def get_transaction_history(self, email: str, limit: int = 50):
        db = self._get_db()
        cursor = db[TRANSACTIONS_COLLECTION].find(
            {"email": email.lower()}, {"_id": 0}
        ).sort("created_at", -1).limit(limit)
        return await cursor.to_list(limit)


# Global service instance
entitlement_service = EntitlementService()
