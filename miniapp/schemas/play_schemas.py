from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class StartPlayRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    telegram_id: int = Field(alias="telegramId")


class PlayActionRequest(BaseModel):
    action: str  # select|add_word|remove_word|reset|check|flip|advance
    value: Optional[Any] = None


class PlayExercise(BaseModel):
    id: str
    type: str
    order: int
    xp_reward: int
    view: dict


class PlaySnapshot(BaseModel):
    session_id: str
    lesson_id: str
    state: str  # loading|running|completed|empty
    index: int
    total: int
    xp_total: int
    failed_saves: int
    exercise: Optional[PlayExercise] = None


class CompletionResponse(BaseModel):
    correct: bool
    score: int


class TransitionResponse(BaseModel):
    state: str
    effects: list[dict]
    completion: Optional[CompletionResponse] = None


class PlayActionResponse(BaseModel):
    transition: TransitionResponse
    session: PlaySnapshot
