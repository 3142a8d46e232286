"""
Magic link delivery.
Builds passwordless sign-in links and hands them to a sender.
"""

import logging
from urllib.parse import urlencode

from ..api.config import APISettings

logger = logging.getLogger(__name__)


def build_magic_link(base_url: str, token: str) -> str:
    separator = "&" if "?" in base_url else "?"
    return f"{base_url}{separator}{urlencode({'token': token})}"


class MagicLinkSender:
    """
    Delivers magic links.

    The default implementation logs the link outside production and only
    the recipient in production. Deployments with an outbound mail provider
    subclass and override send().
    """

    def __init__(self, settings: APISettings):
        self.base_url = settings.magic_link_base_url
        self.log_links = not settings.is_production

    def send(self, email: str, token: str) -> str:
        link = build_magic_link(self.base_url, token)
        if self.log_links:
            logger.info(f"Magic link issued for {email}: {link}")
        else:
            logger.info(f"Magic link issued for {email}")
        return link
