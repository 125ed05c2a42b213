"""
Common utility functions used across multiple routes and services.
"""

from datetime import date, datetime
from typing import Any, Optional

from miniapp.errors import ValidationError
from miniapp.models.models import Exercise, Lesson, User, UserProgress

DEFAULT_NICKNAME = "User"
DEFAULT_AVATAR = "👤"


def iso_format(dt: Optional[datetime]) -> Optional[str]:
    """Format datetime as ISO string with Z suffix."""
    if dt is None:
        return None
    return dt.isoformat() + "Z"


def today() -> date:
    return datetime.utcnow().date()


def parse_telegram_id(raw: Any) -> int:
    """Telegram ids arrive as strings from query params and some clients."""
    if isinstance(raw, bool):
        raise ValidationError("Invalid telegram_id format")
    if isinstance(raw, int):
        return raw
    try:
        return int(str(raw).strip())
    except (TypeError, ValueError):
        raise ValidationError("Invalid telegram_id format")


def _first(*values):
    for v in values:
        if v is not None and v != "":
            return v
    return None


def normalize_user(user: User) -> dict:
    """
    Map a users row onto the canonical profile fields.

    Rows written before the profile migration only carry username/first_name/xp;
    the newer nickname/avatar/total_xp columns win whenever they are set.
    """
    total_xp = user.total_xp if user.total_xp is not None else (user.xp or 0)
    last_activity = user.last_activity_date or today()
    return {
        "id": user.id,
        "telegram_id": int(user.telegram_id),
        "nickname": _first(user.nickname, user.username, user.first_name) or DEFAULT_NICKNAME,
        "avatar": _first(user.avatar, user.first_name) or DEFAULT_AVATAR,
        "level": user.level or "A1",
        "theme": user.theme or "light",
        "is_onboarded": True if user.is_onboarded is None else bool(user.is_onboarded),
        "total_xp": int(total_xp),
        "current_streak": int(user.current_streak or 0),
        "last_activity_date": last_activity.isoformat(),
        "created_at": iso_format(user.created_at),
        "updated_at": iso_format(user.updated_at),
    }


def lesson_to_dict(lesson: Lesson) -> dict:
    return {
        "id": lesson.id,
        "title": lesson.title,
        "description": lesson.description,
        "level": lesson.level,
        "order": int(lesson.order),
        "created_at": iso_format(lesson.created_at),
        "updated_at": iso_format(lesson.updated_at),
    }


def exercise_to_dict(exercise: Exercise, with_lesson: bool = True) -> dict:
    data = {
        "id": exercise.id,
        "lesson_id": exercise.lesson_id,
        "type": exercise.type,
        "order": int(exercise.order),
        "content_json": exercise.content_json or {},
        "xp_reward": int(exercise.xp_reward),
        "created_at": iso_format(exercise.created_at),
        "updated_at": iso_format(exercise.updated_at),
    }
    if with_lesson and exercise.lesson is not None:
        data["lessons"] = {
            "id": exercise.lesson.id,
            "title": exercise.lesson.title,
            "level": exercise.lesson.level,
        }
    return data


def progress_to_dict(progress: UserProgress) -> dict:
    return {
        "id": progress.id,
        "user_id": progress.user_id,
        "lesson_id": progress.lesson_id,
        "exercise_id": progress.exercise_id,
        "completed": bool(progress.completed),
        "score": progress.score,
        "completed_at": iso_format(progress.completed_at),
        "created_at": iso_format(progress.created_at),
        "updated_at": iso_format(progress.updated_at),
    }
