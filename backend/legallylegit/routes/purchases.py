"""Product and Purchase Routes

- GET /api/products - Pricing catalogue (no auth)
- POST /api/purchases/checkout - Stripe Checkout for a product
- GET /api/purchases/{session_id}/status - Pending or completed
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
import logging

from legallylegit.errors import ServiceUnavailable
from legallylegit.models.products import PRODUCTS, get_product
from legallylegit.models.profile import UserSession
from legallylegit.routes.auth import get_current_session
from legallylegit.routes.errors import not_found, to_http_exception
from legallylegit.services.purchase_service import purchase_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Purchases"])


class CheckoutRequest(BaseModel):
    product_id: str


class CheckoutResponse(BaseModel):
    checkout_url: str
    session_id: str


@router.get("/products")
async def list_products():
    return {"products": [p.model_dump() for p in PRODUCTS]}


@router.post("/purchases/checkout", response_model=CheckoutResponse)
async def create_checkout(request: CheckoutRequest, session: UserSession = Depends(get_current_session)):
    product = get_product(request.product_id)
    if not product:
        raise HTTPException(status_code=400, detail=f"Invalid product: {request.product_id}")
    try:
        return await purchase_service.create_checkout(session.email, product)
    except ServiceUnavailable as e:
        raise to_http_exception(e)


@router.get("/purchases/{session_id}/status")
async def get_purchase_status(session_id: str, session: UserSession = Depends(get_current_session)):
    checkout = await purchase_service.get_checkout(session_id)
    if not checkout or checkout.email != session.email:
        raise not_found(f"Checkout {session_id} not found")
    return {"session_id": session_id, "product_id": checkout.product_id, "status": checkout.status.value}
