"""ORM models for the Decanted schema.

The Alembic baseline creates the same tables on Postgres; tests build them
with ``Base.metadata.create_all`` on SQLite.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from decanted.db.base import Base, JSONType, new_uuid, utcnow


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class Profile(Base):
    """One row per identity-provider user; ``id`` is the token subject."""

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    alias: Mapped[str | None] = mapped_column(String(64), nullable=True)
    email: Mapped[str | None] = mapped_column(String(320), nullable=True)
    country: Mapped[str | None] = mapped_column(String(64), nullable=True)
    state: Mapped[str | None] = mapped_column(String(64), nullable=True)
    locale: Mapped[str] = mapped_column(String(16), default="en")
    tier: Mapped[str] = mapped_column(String(8), default="free")
    stripe_customer_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    trial_started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


# ---------------------------------------------------------------------------
# Wine Options sessions
# ---------------------------------------------------------------------------


class GameSession(Base):
    __tablename__ = "game_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    invite_code: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    host_user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(16), default="open")
    is_open: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class SessionParticipant(Base):
    __tablename__ = "session_participants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("game_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    user_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    display_name: Mapped[str] = mapped_column(String(64), default="Guest")
    is_host: Mapped[bool] = mapped_column(Boolean, default=False)
    score: Mapped[int] = mapped_column(Integer, default=0)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


class GameRound(Base):
    """A round of a session.

    (session_id, round_number) is not unique: repeated start calls insert
    repeated rounds and readers take the latest.
    """

    __tablename__ = "game_rounds"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("game_sessions.id", ondelete="CASCADE"), nullable=False, index=True
    )
    round_number: Mapped[int] = mapped_column(Integer, default=1)
    status: Mapped[str] = mapped_column(String(16), default="pending")
    payload: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict)
    started_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class RoundAnswer(Base):
    __tablename__ = "round_answers"
    __table_args__ = (UniqueConstraint("round_id", "participant_id", name="uq_round_answers_round_participant"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    round_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("game_rounds.id", ondelete="CASCADE"), nullable=False
    )
    participant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("session_participants.id", ondelete="CASCADE"), nullable=False
    )
    selected_index: Mapped[int] = mapped_column(Integer, nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, default=False)
    answered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class WineOptionsResult(Base):
    """Append-only log of finished Wine Options games."""

    __tablename__ = "wine_options_results"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    mode: Mapped[str] = mapped_column(String(8), default="solo")
    score: Mapped[int] = mapped_column(Integer, nullable=False)
    max_score: Mapped[int] = mapped_column(Integer, default=5)
    duration_seconds: Mapped[float | None] = mapped_column(Float, nullable=True)
    streak_bonus: Mapped[bool] = mapped_column(Boolean, default=False)
    time_bonus: Mapped[bool] = mapped_column(Boolean, default=False)
    points_awarded: Mapped[int] = mapped_column(Integer, default=0)
    session_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    invite_code: Mapped[str | None] = mapped_column(String(16), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


# ---------------------------------------------------------------------------
# Points
# ---------------------------------------------------------------------------


class PointsLedger(Base):
    __tablename__ = "points_ledger"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    points: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(32), nullable=False)
    meta: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict)
    dedupe_key: Mapped[str | None] = mapped_column(String(200), unique=True, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


class UserPoints(Base):
    """Denormalised running total per user."""

    __tablename__ = "user_points"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    total_points: Mapped[int] = mapped_column(Integer, default=0)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


# ---------------------------------------------------------------------------
# Daily content
# ---------------------------------------------------------------------------


class DailyVocab(Base):
    __tablename__ = "daily_vocab"
    __table_args__ = (UniqueConstraint("for_date", "locale", name="uq_daily_vocab_date_locale"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    locale: Mapped[str] = mapped_column(String(16), default="en")
    for_date: Mapped[date] = mapped_column(Date, nullable=False)
    term: Mapped[str] = mapped_column(String(128), nullable=False)
    question: Mapped[str] = mapped_column(Text, nullable=False)
    options: Mapped[list[str]] = mapped_column(JSONType, default=list)
    correct_index: Mapped[int] = mapped_column(Integer, nullable=False)
    points_award: Mapped[int] = mapped_column(Integer, default=5)


class TrialQuiz(Base):
    __tablename__ = "trial_quizzes"
    __table_args__ = (UniqueConstraint("for_date", "locale", name="uq_trial_quizzes_date_locale"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    locale: Mapped[str] = mapped_column(String(16), default="en")
    for_date: Mapped[date] = mapped_column(Date, nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    questions: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, default=list)
    points_award: Mapped[int] = mapped_column(Integer, default=5)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False)


class TrialQuizAttempt(Base):
    __tablename__ = "trial_quiz_attempts"
    __table_args__ = (
        UniqueConstraint("user_id", "for_date", "locale", name="uq_trial_quiz_attempts_user_date_locale"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    quiz_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    locale: Mapped[str] = mapped_column(String(16), default="en")
    for_date: Mapped[date] = mapped_column(Date, nullable=False)
    correct_count: Mapped[int] = mapped_column(Integer, default=0)
    points_awarded: Mapped[int] = mapped_column(Integer, default=0)
    source: Mapped[str] = mapped_column(String(16), default="web")
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


# ---------------------------------------------------------------------------
# Swirdle
# ---------------------------------------------------------------------------


class SwirdleWord(Base):
    __tablename__ = "swirdle_words"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    word: Mapped[str] = mapped_column(String(16), nullable=False)
    definition: Mapped[str] = mapped_column(Text, default="")
    difficulty: Mapped[str] = mapped_column(String(16), default="medium")
    category: Mapped[str] = mapped_column(String(32), default="general")
    hints: Mapped[list[str]] = mapped_column(JSONType, default=list)
    date_scheduled: Mapped[date | None] = mapped_column(Date, unique=True, nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False)


class SwirdleAttempt(Base):
    __tablename__ = "swirdle_attempts"
    __table_args__ = (UniqueConstraint("user_id", "word_id", name="uq_swirdle_attempts_user_word"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    word_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("swirdle_words.id", ondelete="CASCADE"), nullable=False
    )
    guesses: Mapped[list[str]] = mapped_column(JSONType, default=list)
    attempts: Mapped[int] = mapped_column(Integer, default=0)
    completed: Mapped[bool] = mapped_column(Boolean, default=False)
    won: Mapped[bool] = mapped_column(Boolean, default=False)
    hints_used: Mapped[list[int]] = mapped_column(JSONType, default=list)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)


class SwirdleUserStats(Base):
    __tablename__ = "swirdle_user_stats"

    user_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    games_played: Mapped[int] = mapped_column(Integer, default=0)
    wins: Mapped[int] = mapped_column(Integer, default=0)
    current_streak: Mapped[int] = mapped_column(Integer, default=0)
    max_streak: Mapped[int] = mapped_column(Integer, default=0)
    last_played: Mapped[date | None] = mapped_column(Date, nullable=True)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)


# ---------------------------------------------------------------------------
# Guess What
# ---------------------------------------------------------------------------


class GuessWhatChallenge(Base):
    __tablename__ = "guess_what_challenges"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    week_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    video_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    questions: Mapped[list[dict[str, Any]]] = mapped_column(JSONType, default=list)
    reveal: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict)
    points_award: Mapped[int] = mapped_column(Integer, default=10)
    is_published: Mapped[bool] = mapped_column(Boolean, default=False)


class GuessWhatResponse(Base):
    __tablename__ = "guess_what_responses"
    __table_args__ = (UniqueConstraint("user_id", "challenge_id", name="uq_guess_what_responses_user_challenge"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False)
    challenge_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("guess_what_challenges.id", ondelete="CASCADE"), nullable=False
    )
    answers: Mapped[dict[str, int]] = mapped_column(JSONType, default=dict)
    score: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


# ---------------------------------------------------------------------------
# Badges
# ---------------------------------------------------------------------------


class Badge(Base):
    __tablename__ = "badges"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    code: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="")
    icon: Mapped[str | None] = mapped_column(String(64), nullable=True)
    tier: Mapped[str] = mapped_column(String(16), default="bronze")
    trigger_type: Mapped[str] = mapped_column(String(32), nullable=False)
    trigger_config: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict)
    sort_order: Mapped[int] = mapped_column(Integer, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)


class BadgeAward(Base):
    __tablename__ = "badge_awards"
    __table_args__ = (UniqueConstraint("user_id", "badge_code", name="uq_badge_awards_user_code"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    badge_code: Mapped[str] = mapped_column(
        String(64), ForeignKey("badges.code", ondelete="CASCADE"), nullable=False
    )
    awarded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)


# ---------------------------------------------------------------------------
# Label OCR
# ---------------------------------------------------------------------------


class WineLabel(Base):
    __tablename__ = "wine_labels"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_uuid)
    created_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    ocr_text: Mapped[str] = mapped_column(Text, default="")
    vintage_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    is_non_vintage: Mapped[bool] = mapped_column(Boolean, default=False)
    inferred_variety: Mapped[str | None] = mapped_column(String(64), nullable=True)
    inferred_varieties: Mapped[list[str]] = mapped_column(JSONType, default=list)
    inference_meta: Mapped[dict[str, Any]] = mapped_column(JSONType, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
