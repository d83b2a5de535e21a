"""Product Catalogue

One-time bundles grant credits; the recurring plan upgrades the tier.
Prices are in whole Australian dollars for display and cents for Stripe.
"""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime, timezone
from enum import Enum
import uuid


class Product(BaseModel):
    product_id: str
    name: str
    subtitle: Optional[str] = None
    price_aud: int
    stripe_price_id: str
    features: List[str] = Field(default_factory=list)
    popular: bool = False
    recurring: bool = False

    # Entitlement grant applied when payment succeeds
    grant_doc_slots: int = 0
    grant_ai_queries: int = 0
    upgrades_to_pro: bool = False

    @property
    def checkout_mode(self) -> str:
        return "subscription" if self.recurring else "payment"


PRODUCTS: List[Product] = [
    Product(
        product_id="launchpad",
        name="Launchpad Bundle",
        subtitle="One-time payment",
        price_aud=297,
        stripe_price_id="price_launchpad_297",
        features=[
            "5 Document Credits",
            "100 AI Assistant Queries",
            "AI Risk Analysis on all docs",
            "Lifetime access to generated documents",
        ],
        grant_doc_slots=5,
        grant_ai_queries=100,
    ),
    Product(
        product_id="pro",
        name="Business Pro",
        subtitle="Best value for ongoing protection",
        price_aud=47,
        stripe_price_id="price_pro_monthly_47",
        features=[
            "Unlimited Document Generation",
            "Unlimited AI Assistant Queries",
            "Unlimited AI Risk Analyses",
            "Secure Document Storage",
            "Priority Email Support",
        ],
        popular=True,
        recurring=True,
        upgrades_to_pro=True,
    ),
    Product(
        product_id="ultimate",
        name="Ultimate Bundle",
        subtitle="Comprehensive one-time package",
        price_aud=497,
        stripe_price_id="price_ultimate_497",
        features=[
            "15 Document Credits",
            "300 AI Assistant Queries",
            "Includes all current & future templates",
            "AI Risk Analysis on all docs",
            "Lifetime access to generated documents",
        ],
        grant_doc_slots=15,
        grant_ai_queries=300,
    ),
]


def get_product(product_id: str) -> Optional[Product]:
    return next((p for p in PRODUCTS if p.product_id == product_id), None)


class CheckoutStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class PendingCheckout(BaseModel):
    """Stripe Checkout session awaiting its completion webhook"""
    checkout_id: str = Field(default_factory=lambda: f"LLC-{uuid.uuid4().hex[:12].upper()}")
    email: str
    product_id: str
    price_aud: int
    stripe_checkout_session_id: str
    status: CheckoutStatus = CheckoutStatus.PENDING

    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    model_config = {"extra": "ignore"}
