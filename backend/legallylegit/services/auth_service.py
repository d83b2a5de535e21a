"""Email-capture sessions

Login is email capture: the first login creates the free-tier profile,
every login issues a new session id. Logout only drops the session; the
profile survives.
"""

from typing import Optional, Tuple
import logging

from legallylegit.models.profile import UserProfile, UserSession
from legallylegit.services.entitlement_service import entitlement_service
from legallylegit.services.newsletter_service import newsletter_service
from legallylegit.services.session_store import session_key, session_store

logger = logging.getLogger(__name__)

NEWSLETTER_WARNING = "We couldn't subscribe you to the newsletter right now. You're still signed in."


class AuthService:
    def __init__(self, store=None, entitlements=None, newsletter=None):
        self.store = store or session_store
        self.entitlements = entitlements or entitlement_service
        self.newsletter = newsletter or newsletter_service
    
    async def login(
        self,
        email: str,
        newsletter_consent: bool = False,
    ) -> Tuple[UserSession, UserProfile, Optional[str]]:
        """Returns (session, profile, warning)."""
        warning = None
        subscribed = False
        if newsletter_consent:
            subscribed, error = await self.newsletter.add_subscriber(email)
            if not subscribed:
                logger.warning(f"Newsletter signup failed for {email}: {error}")
                warning = NEWSLETTER_WARNING
        
        profile, created = await self.entitlements.create_profile(email, newsletter_subscribed=subscribed)
        session = UserSession(email=profile.email)
        await self.store.set(session_key(session.session_id), session)
        
        logger.info(f"{'New' if created else 'Returning'} user signed in: {profile.email}")
        return session, profile, warning
    
    async def get_session(self, session_id: str) -> Optional[UserSession]:
        return await self.store.get(session_key(session_id), UserSession)
    
    async def logout(self, session_id: str) -> bool:
        removed = await self.store.delete(session_key(session_id))
        if removed:
            logger.info(f"Session {session_id[:8]}... ended")
        return removed


# Global service instance
auth_service = AuthService()
