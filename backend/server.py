from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
import uuid
from contextlib import asynccontextmanager
from database import database

from legallylegit import config
from legallylegit.errors import LegallyLegitError
from legallylegit.routes import (
    auth_router,
    templates_router,
    documents_router,
    assistant_router,
    quiz_router,
    purchases_router,
    webhooks_router,
)
from legallylegit.routes.errors import to_http_exception
from legallylegit.services.entitlement_service import ProfileNotFound

import os
import logging

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


# Lifespan context manager for startup/shutdown
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting Legally Legit AI API")
    if os.environ.get("PYTEST_RUNNING"):
        logger.info("PYTEST_RUNNING set; skipping database connection")
        yield
        return

    await database.connect()

    if not config.LLM_API_KEY:
        logger.error("LLM_API_KEY is not set. Document generation and the assistant will fail.")
    if not config.STRIPE_API_KEY:
        logger.warning("STRIPE_API_KEY is not set. Checkout is disabled.")
    else:
        stripe_mode = "test" if config.STRIPE_API_KEY.startswith("sk_test_") else "live"
        logger.info("STRIPE_MODE = %s (from Stripe key prefix)", stripe_mode)
    logger.info(
        "Risk thresholds=%s free tier: queries=%s doc_slots=%s",
        config.RISK_LEVEL_THRESHOLDS, config.FREE_TIER_AI_QUERIES, config.FREE_TIER_DOC_SLOTS,
    )

    yield

    # Shutdown
    logger.info("Shutting down Legally Legit AI API")
    await database.close()

# Create FastAPI app
app = FastAPI(
    title="Legally Legit AI API",
    description="AI-generated Australian legal documents with risk analysis",
    version="1.0.0",
    lifespan=lifespan
)

# CORS configuration
app.add_middleware(
    CORSMiddleware,
    allow_credentials=True,
    allow_origins=config.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(templates_router)
app.include_router(documents_router)
app.include_router(assistant_router)  # Streaming, search-grounded
app.include_router(quiz_router)
app.include_router(purchases_router)
app.include_router(webhooks_router)  # Stripe

# Root endpoint
@app.get("/api")
async def root():
    return {
        "service": "Legally Legit AI",
        "tagline": "Australian legal documents, risk-checked",
        "version": "1.0.0",
        "status": "operational"
    }

# Health check
@app.get("/api/health")
async def health_check():
    return {
        "status": "healthy",
        "environment": os.getenv("ENVIRONMENT", "development")
    }


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    request_id = str(uuid.uuid4())
    errors = exc.errors()
    logger.warning(
        "Validation failed request_id=%s path=%s errors=%s",
        request_id,
        request.url.path,
        [(e.get("loc"), e.get("msg"), e.get("type")) for e in errors],
    )
    return JSONResponse(
        status_code=422,
        content={
            "detail": {
                "error_code": "VALIDATION_FAILED",
                "message": "Request validation failed.",
                "errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors],
            },
            "request_id": request_id,
        },
    )


# Product errors that escaped a route
@app.exception_handler(LegallyLegitError)
async def legally_legit_exception_handler(request: Request, exc: LegallyLegitError):
    http_exc = to_http_exception(exc)
    logger.warning(f"{exc.error_code} on {request.url.path}: {exc.message}")
    return JSONResponse(status_code=http_exc.status_code, content={"detail": http_exc.detail})


@app.exception_handler(ProfileNotFound)
async def profile_not_found_handler(request: Request, exc: ProfileNotFound):
    return JSONResponse(
        status_code=404,
        content={"detail": {"error_code": "PROFILE_NOT_FOUND", "message": str(exc)}},
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "server:app",
        host="0.0.0.0",
        port=8001,
        reload=os.getenv("ENVIRONMENT") == "development"
    )
