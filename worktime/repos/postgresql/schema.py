"""
Table definitions for the PostgreSQL repositories.
"""

import logging

from asyncpg import Pool

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS staff_members (
    user_id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT,
    role TEXT NOT NULL DEFAULT 'employee',
    employment_type TEXT NOT NULL DEFAULT 'full_time',
    weekly_quota DOUBLE PRECISION NOT NULL DEFAULT 40,
    is_active BOOLEAN NOT NULL DEFAULT TRUE
);

CREATE TABLE IF NOT EXISTS public_holidays (
    holiday_id TEXT PRIMARY KEY,
    holiday_date DATE NOT NULL UNIQUE,
    name TEXT NOT NULL,
    region TEXT
);

CREATE TABLE IF NOT EXISTS schedule_days (
    user_id TEXT NOT NULL,
    week_start DATE NOT NULL,
    weekday TEXT NOT NULL,
    schedule_day_id TEXT NOT NULL UNIQUE,
    is_working BOOLEAN NOT NULL DEFAULT FALSE,
    time_blocks JSONB NOT NULL DEFAULT '[]'::jsonb,
    start_time TEXT,
    end_time TEXT,
    last_updated_by TEXT,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL,
    PRIMARY KEY (user_id, week_start, weekday)
);

CREATE TABLE IF NOT EXISTS calendar_events (
    event_id TEXT PRIMARY KEY,
    owner_id TEXT NOT NULL,
    start_time TIMESTAMPTZ NOT NULL,
    end_time TIMESTAMPTZ NOT NULL,
    is_recurring BOOLEAN NOT NULL DEFAULT FALSE,
    event_data JSONB NOT NULL
);

CREATE INDEX IF NOT EXISTS calendar_events_owner_start
    ON calendar_events (owner_id, start_time);

CREATE TABLE IF NOT EXISTS schedule_audit (
    audit_id BIGSERIAL PRIMARY KEY,
    action TEXT NOT NULL,
    actor_id TEXT NOT NULL,
    entity_type TEXT NOT NULL,
    entity_id TEXT NOT NULL,
    target_user_id TEXT,
    week_start DATE,
    details JSONB NOT NULL DEFAULT '{}'::jsonb,
    recorded_at TIMESTAMPTZ NOT NULL
);

CREATE INDEX IF NOT EXISTS schedule_audit_user_week
    ON schedule_audit (target_user_id, week_start);
"""


async def create_schema(pool: Pool) -> None:
    """Create the tables if they do not exist yet."""
    async with pool.acquire() as conn:
        await conn.execute(SCHEMA)
    logger.info("Ensured PostgreSQL schema")
