"""Encrypted per-user credential storage."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from src.db.models import UserSettings
from src.schemas import UserSettingsData

from .encryption import CredentialCipher

logger = logging.getLogger(__name__)

DEFAULT_CREDENTIAL_TTL_DAYS = 182


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite hands back naive timestamps even for timezone-aware columns
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def is_credential_expired(
    expires_at: Optional[datetime], now: Optional[datetime] = None
) -> bool:
    """A credential without an expiry never expires."""
    if expires_at is None:
        return False
    return (now or _utcnow()) > _as_utc(expires_at)


class UserSettingsStore:
    """Reads and writes a user's credentials through an injected session."""

    def __init__(
        self,
        session: Session,
        cipher: CredentialCipher,
        credential_ttl_days: int = DEFAULT_CREDENTIAL_TTL_DAYS,
    ):
        self.session = session
        self.cipher = cipher
        self.credential_ttl_days = credential_ttl_days

    def _find(self, user_email: str) -> Optional[UserSettings]:
        return self.session.scalars(
            select(UserSettings).where(UserSettings.user_email == user_email).limit(1)
        ).first()

    def _reveal(
        self, blob: Optional[str], expires_at: Optional[datetime], user_email: str
    ) -> str:
        if not blob or is_credential_expired(expires_at):
            return ""
        return self.cipher.decrypt(blob, user_email)

    def get(self, user_email: str) -> UserSettingsData:
        """Return decrypted settings; missing, expired or unreadable values are empty."""
        try:
            row = self._find(user_email)
        except SQLAlchemyError as e:
            logger.error("Failed to fetch user settings: %s", type(e).__name__)
            return UserSettingsData()

        if row is None:
            return UserSettingsData()

        return UserSettingsData(
            gemini_api_key=self._reveal(
                row.gemini_api_key, row.gemini_key_expires_at, user_email
            ),
            github_pat_token=self._reveal(
                row.github_pat_token, row.github_token_expires_at, user_email
            ),
            gemini_key_expires_at=_as_utc(row.gemini_key_expires_at),
            github_token_expires_at=_as_utc(row.github_token_expires_at),
        )

    def create_empty(self, user_email: str) -> bool:
        """Create an empty settings row for a user if none exists yet."""
        try:
            if self._find(user_email) is None:
                self.session.add(UserSettings(user_email=user_email))
                self.session.commit()
            return True
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to create user settings: %s", type(e).__name__)
            return False

    def save(self, user_email: str, data: UserSettingsData) -> bool:
        """
        Encrypt and upsert a user's credentials.

        Empty values clear the stored credential and its expiry. Raises
        ``ValidationError`` or ``EncryptionError`` before touching the database;
        returns ``False`` if the database write fails.
        """
        default_expiration = _utcnow() + timedelta(days=self.credential_ttl_days)

        values = {
            "gemini_api_key": None,
            "gemini_key_expires_at": None,
            "github_pat_token": None,
            "github_token_expires_at": None,
        }
        if data.gemini_api_key:
            values["gemini_api_key"] = self.cipher.encrypt(
                data.gemini_api_key, user_email
            )
            values["gemini_key_expires_at"] = (
                data.gemini_key_expires_at or default_expiration
            )
        if data.github_pat_token:
            values["github_pat_token"] = self.cipher.encrypt(
                data.github_pat_token, user_email
            )
            values["github_token_expires_at"] = (
                data.github_token_expires_at or default_expiration
            )

        try:
            row = self._find(user_email)
            if row is None:
                row = UserSettings(user_email=user_email)
                self.session.add(row)
            for field, value in values.items():
                setattr(row, field, value)
            row.updated_at = _utcnow()
            self.session.commit()
            return True
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to save user settings: %s", type(e).__name__)
            return False
