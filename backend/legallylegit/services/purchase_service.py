"""Purchase Service

Stripe Checkout for the product catalogue and the webhook side effects:
- checkout.session.completed grants the product's entitlements
- customer.subscription.deleted returns a pro subscriber to the free tier

Grants are idempotent per checkout session id.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
import logging

import stripe

from database import database
from legallylegit import config
from legallylegit.errors import ServiceUnavailable
from legallylegit.models.products import CheckoutStatus, PendingCheckout, Product, get_product
from legallylegit.services.entitlement_service import entitlement_service

logger = logging.getLogger(__name__)

CHECKOUTS_COLLECTION = "legallylegit_checkouts"

# Tag on every Stripe object this service creates; other events are ignored
STRIPE_PRODUCT_TAG = "legallylegit"


class PurchaseService:
    """Stripe checkout creation and fulfilment."""
    
    def __init__(self, entitlements=None):
        self.db = None
        self.entitlements = entitlements or entitlement_service
    
    def _get_db(self):
        if self.db is None:
            self.db = database.get_db()
        return self.db
    
    def _line_item(self, product: Product) -> Dict[str, Any]:
        price_data: Dict[str, Any] = {
            "currency": "aud",
            "product_data": {
                "name": f"Legally Legit AI - {product.name}",
                "description": product.subtitle or product.name,
            },
            "unit_amount": product.price_aud * 100,
        }
        if product.recurring:
            price_data["recurring"] = {"interval": "month"}
        return {"price_data": price_data, "quantity": 1}
    
    async def create_checkout(self, email: str, product: Product) -> Dict[str, str]:
        """Create a Stripe Checkout session and record it as pending."""
        if not config.STRIPE_API_KEY:
            raise ServiceUnavailable("Payments are not configured.")
        stripe.api_key = config.STRIPE_API_KEY
        
        profile = await self.entitlements.require_profile(email)
        metadata = {
            "product": STRIPE_PRODUCT_TAG,
            "email": profile.email,
            "product_id": product.product_id,
        }
        
        try:
            customer_id = profile.stripe_customer_id
            if not customer_id:
                customer = stripe.Customer.create(email=profile.email, metadata={"product": STRIPE_PRODUCT_TAG})
                customer_id = customer.id
                await self.entitlements.set_stripe_customer(profile.email, customer_id)
            
            params: Dict[str, Any] = {
                "customer": customer_id,
                "mode": product.checkout_mode,
                "line_items": [self._line_item(product)],
                "success_url": f"{config.FRONTEND_URL}/dashboard?checkout=success&session_id={{CHECKOUT_SESSION_ID}}",
                "cancel_url": f"{config.FRONTEND_URL}/pricing",
                "metadata": metadata,
            }
            if product.recurring:
                params["subscription_data"] = {"metadata": metadata}
            session = stripe.checkout.Session.create(**params)
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout failed for {email} ({product.product_id}): {e}")
            raise ServiceUnavailable("Payment provider is unavailable. Please try again.") from e
        
        pending = PendingCheckout(
            email=profile.email,
            product_id=product.product_id,
            price_aud=product.price_aud,
            stripe_checkout_session_id=session.id,
        )
        db = self._get_db()
        await db[CHECKOUTS_COLLECTION].insert_one(pending.model_dump())
        
        logger.info(f"Checkout {session.id} created for {profile.email}: {product.product_id}")
        return {"checkout_url": session.url, "session_id": session.id}
    
    def construct_event(self, payload: bytes, sig_header: Optional[str]):
        """Verify and parse a Stripe webhook payload."""
        return stripe.Webhook.construct_event(payload, sig_header, config.STRIPE_WEBHOOK_SECRET)
    
    async def handle_event(self, event) -> Dict[str, str]:
        data_object = event["data"]["object"]
        metadata = data_object.get("metadata") or {}
        if metadata.get("product") != STRIPE_PRODUCT_TAG:
            return {"status": "ignored", "reason": "not_legallylegit"}
        
        event_type = event["type"]
        logger.info(f"Stripe webhook: {event_type}")
        
        if event_type == "checkout.session.completed":
            await self.handle_checkout_completed(data_object)
        elif event_type == "customer.subscription.deleted":
            await self.handle_subscription_deleted(data_object)
        else:
            logger.info(f"Unhandled Stripe event type: {event_type}")
        return {"status": "success", "event_type": event_type}
    
    async def handle_checkout_completed(self, session) -> None:
        metadata = session.get("metadata") or {}
        email = metadata.get("email")
        product = get_product(metadata.get("product_id", ""))
        session_id = session.get("id")
        
        if not email or product is None:
            logger.error(f"Checkout {session_id} missing email or product in metadata")
            return
        if session.get("payment_status") not in (None, "paid", "no_payment_required"):
            logger.warning(f"Checkout {session_id} completed without payment ({session.get('payment_status')})")
            return
        
        await self.entitlements.apply_purchase(email, product, reference_id=session_id)
        
        db = self._get_db()
        await db[CHECKOUTS_COLLECTION].update_one(
            {"stripe_checkout_session_id": session_id},
            {"$set": {
                "status": CheckoutStatus.COMPLETED.value,
                "completed_at": datetime.now(timezone.utc),
            }},
        )
        logger.info(f"Checkout {session_id} fulfilled for {email}: {product.product_id}")
    
    async def handle_subscription_deleted(self, subscription) -> None:
        email = (subscription.get("metadata") or {}).get("email")
        if not email:
            logger.error(f"Subscription {subscription.get('id')} deleted without email metadata")
            return
        await self.entitlements.downgrade(email, reference_id=subscription.get("id"))
    
    async def get_checkout(self, session_id: str) -> Optional[PendingCheckout]:
        db = self._get_db()
        record = await db[CHECKOUTS_COLLECTION].find_one(
            {"stripe_checkout_session_id": session_id}, {"_id": 0}
        )
        return PendingCheckout(**record) if record else None


# Global service instance
purchase_service = PurchaseService()
