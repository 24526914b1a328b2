"""Pydantic schemas for Wine Options sessions."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


# --- Entities ---


class SessionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    invite_code: str
    host_user_id: str
    status: str
    is_open: bool
    created_at: datetime


class ParticipantOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str
    user_id: str | None
    display_name: str
    is_host: bool
    score: int
    joined_at: datetime


class RoundOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    session_id: str
    round_number: int
    status: str
    payload: dict[str, Any]
    started_at: datetime | None
    created_at: datetime


class AnswerOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    round_id: str
    participant_id: str
    selected_index: int
    is_correct: bool
    answered_at: datetime


# --- Requests ---


class CreateSessionRequest(BaseModel):
    host_user_id: str = Field(min_length=1)
    display_name: str | None = None


class JoinSessionRequest(BaseModel):
    invite_code: str
    user_id: str | None = None
    display_name: str | None = None


class StartRoundRequest(BaseModel):
    session_id: str = Field(min_length=1)
    caller_user_id: str = Field(min_length=1)
    payload: dict[str, Any] = Field(default_factory=dict)
    round_number: int = Field(default=1, ge=1)


class SessionStatusRequest(BaseModel):
    caller_user_id: str = Field(min_length=1)
    status: Literal["open", "active", "finished", "cancelled"]


class CloseRoundRequest(BaseModel):
    caller_user_id: str = Field(min_length=1)


class SubmitAnswerRequest(BaseModel):
    participant_id: str = Field(min_length=1)
    selected_index: int = Field(ge=0)
    is_correct: bool = False


class ParticipantPointsRequest(BaseModel):
    points: int


# --- Responses ---


class CreateSessionResponse(BaseModel):
    session: SessionOut
    host: ParticipantOut


class JoinSessionResponse(BaseModel):
    message: str = "Joined session"
    session: SessionOut
    participant: ParticipantOut


class StartRoundResponse(BaseModel):
    ok: bool = True
    round: RoundOut


class SessionSnapshotResponse(BaseModel):
    session: SessionOut
    participants: list[ParticipantOut]
    latest_round: RoundOut | None
