"""Legally Legit Routes"""

from .auth import router as auth_router
from .templates import router as templates_router
from .documents import router as documents_router
from .assistant import router as assistant_router
from .quiz import router as quiz_router
from .purchases import router as purchases_router
from .webhooks import router as webhooks_router

__all__ = [
    "auth_router",
    "templates_router",
    "documents_router",
    "assistant_router",
    "quiz_router",
    "purchases_router",
    "webhooks_router",
]
