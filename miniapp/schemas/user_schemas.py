from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from miniapp.models.levels import CefrLevel

Theme = Literal["light", "dark"]


class UserProfile(BaseModel):
    """Canonical profile; legacy column names never leave the persistence layer."""
    id: str
    telegram_id: int
    nickname: str
    avatar: str
    level: str
    theme: str
    is_onboarded: bool
    total_xp: int
    current_streak: int
    last_activity_date: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class UserResponse(BaseModel):
    user: Optional[UserProfile] = None


class CreateUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    telegram_id: int = Field(alias="telegramId")
    nickname: str = Field(min_length=1)
    avatar: str = Field(min_length=1)
    level: CefrLevel
    theme: Theme = "light"


class UpdateUserRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    telegram_id: int = Field(alias="telegramId")
    nickname: Optional[str] = None
    avatar: Optional[str] = None
    level: Optional[CefrLevel] = None
    theme: Optional[Theme] = None


class NicknameCheckResponse(BaseModel):
    available: bool
    nickname: str
    error: Optional[str] = None
