"""
Newsletter subscription lifecycle - subscribe, reactivate, unsubscribe
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..database.models import Subscription
from ..database.repository import SubscriptionRepository

logger = logging.getLogger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
DEFAULT_SOURCE = "website"


class SubscriptionError(Exception):
    """Base class for subscription state errors"""


class InvalidEmailError(SubscriptionError):
    """Email is missing or malformed"""


class SubscriptionConflictError(SubscriptionError):
    """Requested state is the current state"""


class SubscriptionNotFoundError(SubscriptionError):
    """No subscription for this email"""


@dataclass
class SubscribeResult:
    subscription: Subscription
    reactivated: bool = False


def normalize_email(email) -> str:
    """Lower-case and validate an email; identity is case-insensitive"""
    if not email or not isinstance(email, str):
        raise InvalidEmailError("Valid email address is required")
    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise InvalidEmailError("Please provide a valid email address")
    return email


class SubscriptionManager:
    """Subscription state transitions against an injected session"""

    def __init__(self, session: Session):
        self.session = session

    def subscribe(
        self,
        email: str,
        ip_address: str = "unknown",
        user_agent: str = "unknown",
        source: str = DEFAULT_SOURCE
    ) -> SubscribeResult:
        """
        Subscribe an email

        Args:
            email: email address (any case)
            ip_address: client address, kept as consent record
            user_agent: client user agent, kept as consent record
            source: free-text origin tag

        Returns:
            SubscribeResult; ``reactivated`` is True for a returning subscriber

        Raises:
            InvalidEmailError: malformed email
            SubscriptionConflictError: already active
        """
        email = normalize_email(email)
        source = source or DEFAULT_SOURCE

        existing = SubscriptionRepository.get_by_email(self.session, email)
        if existing:
            if existing.is_active:
                raise SubscriptionConflictError("This email is already subscribed to our newsletter")

            existing.is_active = True
            existing.subscribed_at = datetime.utcnow()
            existing.unsubscribed_at = None
            existing.ip_address = ip_address
            existing.user_agent = user_agent
            existing.source = source
            self.session.flush()
            logger.info("Subscription reactivated: %s", email)
            return SubscribeResult(subscription=existing, reactivated=True)

        subscription = Subscription(
            email=email,
            is_active=True,
            subscribed_at=datetime.utcnow(),
            ip_address=ip_address,
            user_agent=user_agent,
            source=source,
        )
        try:
            with self.session.begin_nested():
                self.session.add(subscription)
                self.session.flush()
        except IntegrityError:
            # Another request created it between lookup and insert
            raise SubscriptionConflictError("This email is already subscribed to our newsletter")

        logger.info("New subscription: %s (source=%s)", email, source)
        return SubscribeResult(subscription=subscription)

    def unsubscribe(self, email: str) -> Subscription:
        """
        Deactivate a subscription

        Raises:
            InvalidEmailError: missing email
            SubscriptionNotFoundError: unknown email
            SubscriptionConflictError: already inactive
        """
        email = normalize_email(email)

        subscription = SubscriptionRepository.get_by_email(self.session, email)
        if subscription is None:
            raise SubscriptionNotFoundError("Email not found in our subscription list")
        if not subscription.is_active:
            raise SubscriptionConflictError("This email is already unsubscribed")

        subscription.is_active = False
        subscription.unsubscribed_at = datetime.utcnow()
        self.session.flush()
        logger.info("Unsubscribed: %s", email)
        return subscription

    def count_active(self) -> int:
        return SubscriptionRepository.count_active(self.session)
