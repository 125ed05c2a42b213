"""
User lookup, onboarding, profile edits and nickname availability.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from miniapp.config import get_db
from miniapp.schemas.user_schemas import (
    CreateUserRequest,
    NicknameCheckResponse,
    UpdateUserRequest,
    UserProfile,
    UserResponse,
)
from miniapp.services.user_service import SessionContext, UserService
from miniapp.utils.common import parse_telegram_id

user_routes = APIRouter()


@user_routes.get("/users", response_model=UserResponse)
async def get_user(
    telegram_id: str = Query(..., description="Telegram user id"),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Resolve an identity to its profile; {"user": null} when not provisioned yet."""
    profile = UserService(db).resolve(SessionContext.from_raw(telegram_id))
    return UserResponse(user=UserProfile(**profile) if profile else None)


@user_routes.post("/users", response_model=UserResponse)
async def create_user(body: CreateUserRequest, db: Session = Depends(get_db)):
    """Onboarding: create the user (201) or refresh an existing profile (200)."""
    profile, created = UserService(db).provision(
        SessionContext(telegram_id=body.telegram_id),
        nickname=body.nickname,
        avatar=body.avatar,
        level=body.level,
        theme=body.theme,
    )
    return JSONResponse(
        status_code=201 if created else 200,
        content=UserResponse(user=UserProfile(**profile)).model_dump(),
    )


@user_routes.put("/users", response_model=UserResponse)
async def update_user(body: UpdateUserRequest, db: Session = Depends(get_db)) -> UserResponse:
    """Level selection and profile/theme edits. XP only changes through progress."""
    profile = UserService(db).update_profile(
        SessionContext(telegram_id=body.telegram_id),
        nickname=body.nickname,
        avatar=body.avatar,
        level=body.level,
        theme=body.theme,
    )
    return UserResponse(user=UserProfile(**profile))


@user_routes.get("/users/check-nickname", response_model=NicknameCheckResponse)
async def check_nickname(
    nickname: str = Query(..., min_length=1),
    telegram_id: Optional[str] = Query(None, description="Identity to ignore (the user's own)"),
    db: Session = Depends(get_db),
) -> NicknameCheckResponse:
    exclude = parse_telegram_id(telegram_id) if telegram_id else None
    available, reason = UserService(db).check_nickname(nickname, exclude_telegram_id=exclude)
    return NicknameCheckResponse(available=available, nickname=nickname, error=reason)
