"""
Kit.com Newsletter Integration
One-way sync: consenting users -> Kit, tagged by signup source.
A failed subscription never blocks login; callers only log a warning.
"""
import logging
import httpx
from typing import Optional, Tuple

from legallylegit import config

logger = logging.getLogger(__name__)


class NewsletterService:
    """Kit.com API integration for newsletter signups."""
    
    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, transport=None):
        self.api_key = api_key if api_key is not None else config.KIT_API_KEY
        self.base_url = base_url or config.KIT_API_BASE
        self._transport = transport
    
    async def add_subscriber(self, email: str, source: str = "legallylegit_login") -> Tuple[bool, Optional[str]]:
        """
        Add subscriber to Kit.
        
        Returns: (success, error_message)
        """
        if not self.api_key:
            logger.warning(f"Kit: API key not configured, skipping {email}")
            return False, "Kit API key not configured"
        
        try:
            async with httpx.AsyncClient(transport=self._transport) as client:
                response = await client.post(
                    f"{self.base_url}/subscribers",
                    json={"email_address": email, "state": "active", "tags": [source]},
                    headers={
                        "Authorization": f"Bearer {self.api_key}",
                        "Content-Type": "application/json",
                    },
                    timeout=10.0,
                )
        except httpx.TimeoutException:
            error_msg = "Kit API timeout"
            logger.error(error_msg)
            return False, error_msg
        except httpx.HTTPError as e:
            error_msg = f"Kit API error: {str(e)}"
            logger.error(error_msg)
            return False, error_msg
        
        if response.status_code in (200, 201):
            logger.info(f"Kit: Subscriber added - {email} (source: {source})")
            return True, None
        if response.status_code == 409:
            logger.info(f"Kit: Subscriber already exists - {email}")
            return True, None
        
        error_msg = f"Kit API error {response.status_code}: {response.text}"
        logger.error(error_msg)
        return False, error_msg


# Singleton instance
newsletter_service = NewsletterService()
