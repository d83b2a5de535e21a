"""Legally Legit Auth Routes

Email capture login; sessions are bearer tokens.

Endpoints:
- POST /api/auth/login - Capture email, create profile on first visit
- POST /api/auth/logout - End the session (profile is kept)
- GET /api/auth/me - Current profile and entitlements
- GET /api/auth/me/transactions - Entitlement journal
"""

from fastapi import APIRouter, Depends, Header, HTTPException, Query
from pydantic import BaseModel, EmailStr
from typing import Optional
import logging

from legallylegit.models.profile import UserProfile, UserSession
from legallylegit.services.auth_service import auth_service
from legallylegit.services.entitlement_service import entitlement_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Auth"])


class LoginRequest(BaseModel):
    email: EmailStr
    newsletter_consent: bool = False


class LoginResponse(BaseModel):
    session_token: str
    profile: UserProfile
    warning: Optional[str] = None


async def get_current_session(authorization: Optional[str] = Header(None)) -> UserSession:
    """Dependency resolving the bearer session."""
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header required")
    
    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization format")
    
    session = await auth_service.get_session(authorization[7:])
    if not session:
        raise HTTPException(status_code=401, detail="Invalid or expired session")
    
    return session


@router.post("/login", response_model=LoginResponse)
async def login(data: LoginRequest):
    """Capture the user's email.

    A newsletter failure is reported as a warning; login still succeeds.
    """
    session, profile, warning = await auth_service.login(data.email, data.newsletter_consent)
    return LoginResponse(session_token=session.session_id, profile=profile, warning=warning)


@router.post("/logout")
async def logout(
    authorization: Optional[str] = Header(None),
    session: UserSession = Depends(get_current_session),
):
    await auth_service.logout(authorization[7:])
    return {"success": True}


@router.get("/me", response_model=UserProfile)
async def me(session: UserSession = Depends(get_current_session)):
    profile = await entitlement_service.get_profile(session.email)
    if not profile:
        raise HTTPException(status_code=404, detail="Profile not found")
    return profile


@router.get("/me/transactions")
async def my_transactions(
    limit: int = Query(50, ge=1, le=200),
    session: UserSession = Depends(get_current_session),
):
    """Entitlement journal for the current user, newest first."""
    transactions = await entitlement_service.get_transaction_history(session.email, limit=limit)
    return {"transactions": transactions, "limit": limit}
