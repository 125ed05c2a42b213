"""
User session resolution, explicit onboarding provisioning, profile edits and
nickname availability.
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from miniapp.errors import PersistenceError, UserNotFound, ValidationError
from miniapp.models.levels import CefrLevel
from miniapp.models.models import User
from miniapp.utils.common import normalize_user, parse_telegram_id, today

logger = logging.getLogger(__name__)

NICKNAME_MIN = 3
NICKNAME_MAX = 20
NICKNAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")

LENGTH_REASON = f"Nickname must be between {NICKNAME_MIN} and {NICKNAME_MAX} characters"
CHARSET_REASON = "Nickname can only contain letters, numbers, underscore and dash"
TAKEN_REASON = "Nickname is already taken"


@dataclass(frozen=True)
class SessionContext:
    """Identity the client holds; passed explicitly into services and runners."""
    telegram_id: int

    @classmethod
    def from_raw(cls, raw) -> "SessionContext":
        return cls(telegram_id=parse_telegram_id(raw))


def nickname_format_error(nickname: str) -> Optional[str]:
    """Return the reason a nickname is malformed, or None. Never touches the DB."""
    if len(nickname) < NICKNAME_MIN or len(nickname) > NICKNAME_MAX:
        return LENGTH_REASON
    if not NICKNAME_RE.match(nickname):
        return CHARSET_REASON
    return None


class UserService:
    def __init__(self, db: DBSession):
        self.db = db

    def get_row(self, telegram_id: int) -> Optional[User]:
        try:
            return self.db.query(User).filter(User.telegram_id == telegram_id).first()
        except SQLAlchemyError as e:
            logger.exception("user lookup failed telegram_id=%s", telegram_id)
            raise PersistenceError(f"Could not load user: {e.__class__.__name__}")

    def require_row(self, telegram_id: int) -> User:
        user = self.get_row(telegram_id)
        if user is None:
            raise UserNotFound(telegram_id)
        return user

    def resolve(self, context: SessionContext) -> Optional[dict]:
        """Normalized profile for the identity, or None. Never provisions."""
        user = self.get_row(context.telegram_id)
        return normalize_user(user) if user is not None else None

    def provision(
        self,
        context: SessionContext,
        *,
        nickname: str,
        avatar: str,
        level: CefrLevel | str,
        theme: str = "light",
    ) -> tuple[dict, bool]:
        """
        Onboarding step: create the user, or refresh the profile when the
        identity already exists. XP is never touched here.
        Returns (profile, created).
        """
        reason = nickname_format_error(nickname)
        if reason:
            raise ValidationError(reason)
        level = self._level(level)

        existing = self.get_row(context.telegram_id)
        now = datetime.utcnow()
        try:
            if existing is not None:
                self._apply_profile(existing, nickname=nickname, avatar=avatar, level=level, theme=theme)
                existing.is_onboarded = True
                existing.updated_at = now
                self.db.add(existing)
                self.db.commit()
                self.db.refresh(existing)
                logger.info("user profile refreshed telegram_id=%s", context.telegram_id)
                return normalize_user(existing), False

            user = User(
                telegram_id=context.telegram_id,
                level=level,
                is_onboarded=True,
                total_xp=0,
                xp=0,
                current_streak=0,
                last_activity_date=today(),
                created_at=now,
                updated_at=now,
            )
            self._apply_profile(user, nickname=nickname, avatar=avatar, theme=theme)
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
            logger.info("user provisioned telegram_id=%s", context.telegram_id)
            return normalize_user(user), True
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("user provisioning failed telegram_id=%s", context.telegram_id)
            raise PersistenceError(f"Could not save user: {e.__class__.__name__}")

    def update_profile(
        self,
        context: SessionContext,
        *,
        nickname: Optional[str] = None,
        avatar: Optional[str] = None,
        level: Optional[CefrLevel | str] = None,
        theme: Optional[str] = None,
    ) -> dict:
        """Level selection and profile/theme edits."""
        if nickname is not None:
            reason = nickname_format_error(nickname)
            if reason:
                raise ValidationError(reason)
        user = self.require_row(context.telegram_id)
        try:
            self._apply_profile(
                user,
                nickname=nickname,
                avatar=avatar,
                level=self._level(level) if level is not None else None,
                theme=theme,
            )
            user.updated_at = datetime.utcnow()
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("user update failed telegram_id=%s", context.telegram_id)
            raise PersistenceError(f"Could not update user: {e.__class__.__name__}")
        return normalize_user(user)

    def check_nickname(self, nickname: str, exclude_telegram_id: Optional[int] = None) -> tuple[bool, Optional[str]]:
        """
        (available, reason). Format problems are reported without a query;
        otherwise any other identity holding the value in either the nickname
        column or the legacy username column makes it taken.
        """
        reason = nickname_format_error(nickname)
        if reason:
            return False, reason
        try:
            q = self.db.query(User.telegram_id).filter(or_(User.nickname == nickname, User.username == nickname))
            if exclude_telegram_id is not None:
                q = q.filter(User.telegram_id != exclude_telegram_id)
            taken = q.first() is not None
        except SQLAlchemyError as e:
            logger.exception("nickname check failed nickname=%s", nickname)
            raise PersistenceError(f"Could not check nickname: {e.__class__.__name__}")
        return (False, TAKEN_REASON) if taken else (True, None)

    # -----Helpers-----

    @staticmethod
    def _level(level: CefrLevel | str) -> str:
        try:
            return CefrLevel(level).value
        except ValueError:
            raise ValidationError(f"Invalid level: {level}")

    @staticmethod
    def _apply_profile(
        user: User,
        *,
        nickname: Optional[str] = None,
        avatar: Optional[str] = None,
        level: Optional[str] = None,
        theme: Optional[str] = None,
    ) -> None:
        # Legacy columns are written alongside so pre-migration readers stay correct.
        if nickname is not None:
            user.nickname = nickname
            user.username = nickname
        if avatar is not None:
            user.avatar = avatar
            user.first_name = avatar
        if level is not None:
            user.level = level
        if theme is not None:
            user.theme = theme
