"""
Login sessions for the barber dashboard and the web developer gallery page.

Sessions live in memory on the server and are handed to clients as opaque
bearer tokens. The role check happens here, never on a flag sent by the client.
"""

import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

from config import settings
from utils.datetime_utils import utc_now
from utils.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

ACCESS_DENIED = "Access denied"


@dataclass
class AdminSession:
    """Logged-in barber. Admins manage every barber's records."""

    token: str
    barber_name: str
    is_admin: bool
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utc_now()) >= self.expires_at

    def can_manage(self, barber_name: str) -> bool:
        return self.is_admin or barber_name == self.barber_name


@dataclass
class DeveloperSession:
    """Holder of the gallery page password."""

    token: str
    issued_at: datetime
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utc_now()) >= self.expires_at


def _password_matches(given: str, expected: str) -> bool:
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))


class _TokenStore:
    """Bearer token registry shared by both kinds of session."""

    def __init__(self, lifetime: timedelta):
        self.lifetime = lifetime
        self._sessions: Dict[str, Any] = {}

    def _open(self, session):
        self._prune(session.issued_at)
        self._sessions[session.token] = session
        return session

    def _prune(self, now: datetime) -> None:
        """Drop expired sessions whose tokens were never presented again."""
        expired = [token for token, s in self._sessions.items() if s.is_expired(now)]
        for token in expired:
            del self._sessions[token]

    def get(self, token: Optional[str], now: Optional[datetime] = None):
        """
        Resolve a bearer token.

        Raises:
            AuthenticationError: Unknown or expired token
        """
        session = self._sessions.get(token or "")
        if session is None:
            raise AuthenticationError(ACCESS_DENIED)
        if session.is_expired(now):
            self._sessions.pop(session.token, None)
            raise AuthenticationError("Session expired")
        return session

    def logout(self, token: Optional[str]) -> bool:
        return self._sessions.pop(token or "", None) is not None


class SessionStore(_TokenStore):
    """Issues, looks up and revokes dashboard sessions."""

    def __init__(self, lifetime: Optional[timedelta] = None):
        super().__init__(lifetime or timedelta(hours=settings.admin_session_hours))

    def login(self, username: str, password: str) -> AdminSession:
        """
        Check credentials and open a session.

        Raises:
            AuthenticationError: Unknown user or wrong password
        """
        account = settings.get_barber_account((username or "").strip())
        if account is None or not _password_matches(password or "", account.password):
            logger.warning(f"Failed dashboard login for '{username}'")
            raise AuthenticationError(ACCESS_DENIED)

        now = utc_now()
        session = AdminSession(
            token=secrets.token_urlsafe(32),
            barber_name=account.username,
            is_admin=account.is_admin,
            issued_at=now,
            expires_at=now + self.lifetime,
        )
        logger.info(f"Dashboard login: {account.username} (admin={account.is_admin})")
        return self._open(session)

    def get(self, token: Optional[str], now: Optional[datetime] = None) -> AdminSession:
        return super().get(token, now)


class DeveloperSessionStore(_TokenStore):
    """Sessions for the gallery management page."""

    def __init__(self, lifetime: Optional[timedelta] = None):
        super().__init__(lifetime or timedelta(hours=settings.webdev_session_hours))

    def login(self, password: str) -> DeveloperSession:
        expected = settings.webdev_password
        if not expected or not _password_matches(password or "", expected):
            logger.warning("Failed web developer login")
            raise AuthenticationError(ACCESS_DENIED)

        now = utc_now()
        session = DeveloperSession(
            token=secrets.token_urlsafe(32),
            issued_at=now,
            expires_at=now + self.lifetime,
        )
        return self._open(session)

    def get(self, token: Optional[str], now: Optional[datetime] = None) -> DeveloperSession:
        return super().get(token, now)
