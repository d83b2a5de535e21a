"""Legally Legit Stripe Webhook Handler

Only events tagged with this product's metadata are processed:
- checkout.session.completed: grant credits or upgrade to pro
- customer.subscription.deleted: downgrade to free
"""

from fastapi import APIRouter, Request, HTTPException
import logging

import stripe

from legallylegit.services.purchase_service import purchase_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webhooks", tags=["Webhooks"])


@router.post("/stripe")
async def handle_stripe_webhook(request: Request):
    payload = await request.body()
    sig_header = request.headers.get("stripe-signature")
    
    try:
        event = purchase_service.construct_event(payload, sig_header)
    except ValueError:
        logger.error("Invalid payload")
        raise HTTPException(status_code=400, detail="Invalid payload")
    except stripe.SignatureVerificationError:
        logger.error("Invalid signature")
        raise HTTPException(status_code=400, detail="Invalid signature")
    
    try:
        return await purchase_service.handle_event(event)
    except Exception as e:
        logger.error(f"Stripe webhook handler error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
