"""Initial schema: users, gamification, interviews, peer interviews.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id VARCHAR(36) PRIMARY KEY,
            name VARCHAR(128) NOT NULL,
            email VARCHAR(320) UNIQUE NOT NULL,
            password_hash VARCHAR(256) NOT NULL,
            profile_url TEXT,
            resume_url TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Token ledger ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS tokens (
            user_id VARCHAR(36) PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
            amount INTEGER NOT NULL DEFAULT 0,
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT tokens_amount_non_negative CHECK (amount >= 0)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_tokens_updated_at ON tokens(updated_at)")

    # --- Streaks ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS streaks (
            user_id VARCHAR(36) PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
            count INTEGER NOT NULL DEFAULT 0,
            last_date TIMESTAMPTZ,
            CONSTRAINT streaks_count_non_negative CHECK (count >= 0)
        )
    """)

    # --- Badge catalog ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS badges (
            id VARCHAR(64) PRIMARY KEY,
            name VARCHAR(128) NOT NULL,
            image_url VARCHAR(256) NOT NULL,
            description TEXT NOT NULL,
            sort_order INTEGER NOT NULL DEFAULT 0
        )
    """)

    # --- Earned badges ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS user_badges (
            id SERIAL PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            badge_id VARCHAR(64) NOT NULL REFERENCES badges(id),
            awarded_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT user_badges_user_id_badge_id_key UNIQUE (user_id, badge_id)
        )
    """)

    # --- Reward idempotency keys ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS reward_events (
            id SERIAL PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            reward_type VARCHAR(32) NOT NULL,
            source_id VARCHAR(64) NOT NULL,
            amount INTEGER NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT reward_events_user_type_source_key UNIQUE (user_id, reward_type, source_id)
        )
    """)

    # --- Interviews ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS interviews (
            id VARCHAR(36) PRIMARY KEY,
            user_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            role VARCHAR(128) NOT NULL,
            level VARCHAR(64) NOT NULL,
            type VARCHAR(64) NOT NULL,
            techstack JSON NOT NULL DEFAULT '[]',
            questions JSON NOT NULL DEFAULT '[]',
            cover_image VARCHAR(256),
            finalized BOOLEAN NOT NULL DEFAULT false,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS ix_interviews_user_id ON interviews(user_id)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS feedback (
            id VARCHAR(36) PRIMARY KEY,
            interview_id VARCHAR(36) NOT NULL REFERENCES interviews(id) ON DELETE CASCADE,
            user_id VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            total_score INTEGER NOT NULL,
            category_scores JSON NOT NULL DEFAULT '[]',
            strengths JSON NOT NULL DEFAULT '[]',
            areas_for_improvement JSON NOT NULL DEFAULT '[]',
            final_assessment TEXT NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT feedback_interview_id_user_id_key UNIQUE (interview_id, user_id)
        )
    """)

    # --- Peer interviews ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS peer_interview_sessions (
            id VARCHAR(36) PRIMARY KEY,
            participant_a VARCHAR(36) NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            participant_b VARCHAR(36) REFERENCES users(id) ON DELETE SET NULL,
            status VARCHAR(16) NOT NULL DEFAULT 'pending',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS peer_interview_questions (
            id VARCHAR(36) PRIMARY KEY,
            session_id VARCHAR(36) NOT NULL REFERENCES peer_interview_sessions(id) ON DELETE CASCADE,
            question TEXT NOT NULL,
            asked_by VARCHAR(36) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("""
        CREATE TABLE IF NOT EXISTS peer_interview_feedback (
            id VARCHAR(36) PRIMARY KEY,
            session_id VARCHAR(36) NOT NULL REFERENCES peer_interview_sessions(id) ON DELETE CASCADE,
            reviewer_id VARCHAR(36) NOT NULL,
            reviewee_id VARCHAR(36) NOT NULL,
            score INTEGER NOT NULL,
            comments TEXT NOT NULL DEFAULT '',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS peer_interview_feedback CASCADE")
    op.execute("DROP TABLE IF EXISTS peer_interview_questions CASCADE")
    op.execute("DROP TABLE IF EXISTS peer_interview_sessions CASCADE")
    op.execute("DROP TABLE IF EXISTS feedback CASCADE")
    op.execute("DROP TABLE IF EXISTS interviews CASCADE")
    op.execute("DROP TABLE IF EXISTS reward_events CASCADE")
    op.execute("DROP TABLE IF EXISTS user_badges CASCADE")
    op.execute("DROP TABLE IF EXISTS badges CASCADE")
    op.execute("DROP TABLE IF EXISTS streaks CASCADE")
    op.execute("DROP TABLE IF EXISTS tokens CASCADE")
    op.execute("DROP TABLE IF EXISTS users CASCADE")
