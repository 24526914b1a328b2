"""Baseline schema.

Creates profiles, Wine Options sessions and rounds, the points ledger,
daily content, Swirdle, Guess What, badges and scanned labels.

Revision ID: 001_baseline
Revises: None
Create Date: 2026-10-17
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_baseline"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Profiles ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS profiles (
            id VARCHAR(64) PRIMARY KEY,
            alias VARCHAR(64),
            email VARCHAR(320),
            country VARCHAR(64),
            state VARCHAR(64),
            locale VARCHAR(16) NOT NULL DEFAULT 'en',
            tier VARCHAR(8) NOT NULL DEFAULT 'free',
            stripe_customer_id VARCHAR(64),
            trial_started_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Wine Options sessions ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS game_sessions (
            id VARCHAR(36) PRIMARY KEY,
            invite_code VARCHAR(16) UNIQUE NOT NULL,
            host_user_id VARCHAR(64) NOT NULL,
            status VARCHAR(16) NOT NULL DEFAULT 'open',
            is_open BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_game_sessions_host
        ON game_sessions(host_user_id)
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS session_participants (
            id VARCHAR(36) PRIMARY KEY,
            session_id VARCHAR(36) NOT NULL REFERENCES game_sessions(id) ON DELETE CASCADE,
            user_id VARCHAR(64),
            display_name VARCHAR(64) NOT NULL DEFAULT 'Guest',
            is_host BOOLEAN NOT NULL DEFAULT false,
            score INTEGER NOT NULL DEFAULT 0,
            joined_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_session_participants_session
        ON session_participants(session_id)
    """)

    # No uniqueness on (session_id, round_number): readers take the latest.
    op.execute("""
        CREATE TABLE IF NOT EXISTS game_rounds (
            id VARCHAR(36) PRIMARY KEY,
            session_id VARCHAR(36) NOT NULL REFERENCES game_sessions(id) ON DELETE CASCADE,
            round_number INTEGER NOT NULL DEFAULT 1,
            status VARCHAR(16) NOT NULL DEFAULT 'pending',
            payload JSONB NOT NULL DEFAULT '{}',
            started_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_game_rounds_session_number
        ON game_rounds(session_id, round_number DESC, created_at DESC)
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS round_answers (
            id VARCHAR(36) PRIMARY KEY,
            round_id VARCHAR(36) NOT NULL REFERENCES game_rounds(id) ON DELETE CASCADE,
            participant_id VARCHAR(36) NOT NULL REFERENCES session_participants(id) ON DELETE CASCADE,
            selected_index INTEGER NOT NULL,
            is_correct BOOLEAN NOT NULL DEFAULT false,
            answered_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_round_answers_round_participant UNIQUE (round_id, participant_id)
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS wine_options_results (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL,
            mode VARCHAR(8) NOT NULL DEFAULT 'solo',
            score INTEGER NOT NULL,
            max_score INTEGER NOT NULL DEFAULT 5,
            duration_seconds DOUBLE PRECISION,
            streak_bonus BOOLEAN NOT NULL DEFAULT false,
            time_bonus BOOLEAN NOT NULL DEFAULT false,
            points_awarded INTEGER NOT NULL DEFAULT 0,
            session_id VARCHAR(36),
            invite_code VARCHAR(16),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_wine_options_results_user
        ON wine_options_results(user_id)
    """)

    # --- Points ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS points_ledger (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL,
            points INTEGER NOT NULL,
            reason VARCHAR(32) NOT NULL,
            meta JSONB NOT NULL DEFAULT '{}',
            dedupe_key VARCHAR(200) UNIQUE,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_points_ledger_user
        ON points_ledger(user_id, created_at DESC)
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS user_points (
            user_id VARCHAR(64) PRIMARY KEY,
            total_points INTEGER NOT NULL DEFAULT 0,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Daily content ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS daily_vocab (
            id VARCHAR(36) PRIMARY KEY,
            locale VARCHAR(16) NOT NULL DEFAULT 'en',
            for_date DATE NOT NULL,
            term VARCHAR(128) NOT NULL,
            question TEXT NOT NULL,
            options JSONB NOT NULL DEFAULT '[]',
            correct_index INTEGER NOT NULL,
            points_award INTEGER NOT NULL DEFAULT 5,
            CONSTRAINT uq_daily_vocab_date_locale UNIQUE (for_date, locale)
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS trial_quizzes (
            id VARCHAR(36) PRIMARY KEY,
            locale VARCHAR(16) NOT NULL DEFAULT 'en',
            for_date DATE NOT NULL,
            title VARCHAR(200) NOT NULL,
            questions JSONB NOT NULL DEFAULT '[]',
            points_award INTEGER NOT NULL DEFAULT 5,
            is_published BOOLEAN NOT NULL DEFAULT false,
            CONSTRAINT uq_trial_quizzes_date_locale UNIQUE (for_date, locale)
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS trial_quiz_attempts (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL,
            quiz_id VARCHAR(36),
            locale VARCHAR(16) NOT NULL DEFAULT 'en',
            for_date DATE NOT NULL,
            correct_count INTEGER NOT NULL DEFAULT 0,
            points_awarded INTEGER NOT NULL DEFAULT 0,
            source VARCHAR(16) NOT NULL DEFAULT 'web',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_trial_quiz_attempts_user_date_locale UNIQUE (user_id, for_date, locale)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_trial_quiz_attempts_user
        ON trial_quiz_attempts(user_id)
    """)

    # --- Swirdle ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS swirdle_words (
            id VARCHAR(36) PRIMARY KEY,
            word VARCHAR(16) NOT NULL,
            definition TEXT NOT NULL DEFAULT '',
            difficulty VARCHAR(16) NOT NULL DEFAULT 'medium',
            category VARCHAR(32) NOT NULL DEFAULT 'general',
            hints JSONB NOT NULL DEFAULT '[]',
            date_scheduled DATE UNIQUE,
            is_published BOOLEAN NOT NULL DEFAULT false
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS swirdle_attempts (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL,
            word_id VARCHAR(36) NOT NULL REFERENCES swirdle_words(id) ON DELETE CASCADE,
            guesses JSONB NOT NULL DEFAULT '[]',
            attempts INTEGER NOT NULL DEFAULT 0,
            completed BOOLEAN NOT NULL DEFAULT false,
            won BOOLEAN NOT NULL DEFAULT false,
            hints_used JSONB NOT NULL DEFAULT '[]',
            completed_at TIMESTAMPTZ,
            CONSTRAINT uq_swirdle_attempts_user_word UNIQUE (user_id, word_id)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_swirdle_attempts_user
        ON swirdle_attempts(user_id)
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS swirdle_user_stats (
            user_id VARCHAR(64) PRIMARY KEY,
            games_played INTEGER NOT NULL DEFAULT 0,
            wins INTEGER NOT NULL DEFAULT 0,
            current_streak INTEGER NOT NULL DEFAULT 0,
            max_streak INTEGER NOT NULL DEFAULT 0,
            last_played DATE,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Guess What ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS guess_what_challenges (
            id VARCHAR(36) PRIMARY KEY,
            title VARCHAR(200) NOT NULL,
            week_date DATE NOT NULL,
            video_url TEXT,
            questions JSONB NOT NULL DEFAULT '[]',
            reveal JSONB NOT NULL DEFAULT '{}',
            points_award INTEGER NOT NULL DEFAULT 10,
            is_published BOOLEAN NOT NULL DEFAULT false
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_guess_what_challenges_week
        ON guess_what_challenges(week_date)
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS guess_what_responses (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL,
            challenge_id VARCHAR(36) NOT NULL REFERENCES guess_what_challenges(id) ON DELETE CASCADE,
            answers JSONB NOT NULL DEFAULT '{}',
            score INTEGER NOT NULL DEFAULT 0,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_guess_what_responses_user_challenge UNIQUE (user_id, challenge_id)
        )
    """)

    # --- Badges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS badges (
            id VARCHAR(36) PRIMARY KEY,
            code VARCHAR(64) UNIQUE NOT NULL,
            name VARCHAR(128) NOT NULL,
            description TEXT NOT NULL DEFAULT '',
            icon VARCHAR(64),
            tier VARCHAR(16) NOT NULL DEFAULT 'bronze',
            trigger_type VARCHAR(32) NOT NULL,
            trigger_config JSONB NOT NULL DEFAULT '{}',
            sort_order INTEGER NOT NULL DEFAULT 0,
            is_active BOOLEAN NOT NULL DEFAULT true
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS badge_awards (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(64) NOT NULL,
            badge_code VARCHAR(64) NOT NULL REFERENCES badges(code) ON DELETE CASCADE,
            awarded_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_badge_awards_user_code UNIQUE (user_id, badge_code)
        )
    """)
    op.execute("""
        CREATE INDEX IF NOT EXISTS idx_badge_awards_user
        ON badge_awards(user_id, awarded_at DESC)
    """)

    # --- Label OCR ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS wine_labels (
            id VARCHAR(36) PRIMARY KEY,
            created_by VARCHAR(64),
            ocr_text TEXT NOT NULL DEFAULT '',
            vintage_year INTEGER,
            is_non_vintage BOOLEAN NOT NULL DEFAULT false,
            inferred_variety VARCHAR(64),
            inferred_varieties JSONB NOT NULL DEFAULT '[]',
            inference_meta JSONB NOT NULL DEFAULT '{}',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS wine_labels CASCADE")
    op.execute("DROP TABLE IF EXISTS badge_awards CASCADE")
    op.execute("DROP TABLE IF EXISTS badges CASCADE")
    op.execute("DROP TABLE IF EXISTS guess_what_responses CASCADE")
    op.execute("DROP TABLE IF EXISTS guess_what_challenges CASCADE")
    op.execute("DROP TABLE IF EXISTS swirdle_user_stats CASCADE")
    op.execute("DROP TABLE IF EXISTS swirdle_attempts CASCADE")
    op.execute("DROP TABLE IF EXISTS swirdle_words CASCADE")
    op.execute("DROP TABLE IF EXISTS trial_quiz_attempts CASCADE")
    op.execute("DROP TABLE IF EXISTS trial_quizzes CASCADE")
    op.execute("DROP TABLE IF EXISTS daily_vocab CASCADE")
    op.execute("DROP TABLE IF EXISTS user_points CASCADE")
    op.execute("DROP TABLE IF EXISTS points_ledger CASCADE")
    op.execute("DROP TABLE IF EXISTS wine_options_results CASCADE")
    op.execute("DROP TABLE IF EXISTS round_answers CASCADE")
    op.execute("DROP TABLE IF EXISTS game_rounds CASCADE")
    op.execute("DROP TABLE IF EXISTS session_participants CASCADE")
    op.execute("DROP TABLE IF EXISTS game_sessions CASCADE")
    op.execute("DROP TABLE IF EXISTS profiles CASCADE")
