"""
Database Schema
===============
Tables for the voice gym tracker:
  - exercises        (exercise library, unique names + spoken aliases)
  - workouts         (one row per logged exercise session, sets as JSONB)
  - workout_splits   (weekly plan, one row per user + weekday)

The common exercise library is seeded on every run; existing rows are kept.
Safe to run multiple times (uses IF NOT EXISTS / ON CONFLICT).
"""

from __future__ import annotations

import json
import logging
from typing import List, Optional, Tuple

import psycopg2

from constants import EXERCISE_LIBRARY
from db_utils import get_conn_str

logger = logging.getLogger("schema")

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS exercises (
    id SERIAL PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    muscle_group TEXT NOT NULL DEFAULT 'Unknown',
    aliases JSONB NOT NULL DEFAULT '[]'::jsonb,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

CREATE TABLE IF NOT EXISTS workouts (
    id SERIAL PRIMARY KEY,
    user_id TEXT NOT NULL,
    exercise_id INTEGER NOT NULL REFERENCES exercises(id),
    date DATE NOT NULL DEFAULT CURRENT_DATE,
    weight_kg NUMERIC(6,2),
    sets JSONB NOT NULL,
    notes TEXT DEFAULT '',
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    CONSTRAINT workouts_sets_not_empty CHECK (jsonb_array_length(sets) > 0)
);

CREATE INDEX IF NOT EXISTS idx_workouts_user_created
    ON workouts(user_id, created_at DESC);

CREATE INDEX IF NOT EXISTS idx_workouts_user_exercise_date
    ON workouts(user_id, exercise_id, date);

CREATE TABLE IF NOT EXISTS workout_splits (
    id SERIAL PRIMARY KEY,
    user_id TEXT NOT NULL,
    day_of_week TEXT NOT NULL,
    muscle_groups JSONB NOT NULL DEFAULT '[]'::jsonb,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    UNIQUE (user_id, day_of_week)
)
"""

SEED_SQL = """
INSERT INTO exercises (name, muscle_group, aliases)
VALUES (%s, %s, %s::jsonb)
ON CONFLICT (name) DO NOTHING
"""


def seed_rows() -> List[Tuple[str, str, str]]:
    """Exercise library rows as (name, muscle_group, aliases_json)."""
    rows = []
    for name, (muscle_group, aliases) in EXERCISE_LIBRARY.items():
        spoken = [name.lower()] + [a for a in aliases if a != name.lower()]
        rows.append((name, muscle_group, json.dumps(spoken)))
    return rows


def ensure_schema(conn_str: Optional[str] = None) -> None:
    """Create tables and seed the exercise library."""
    cs = conn_str or get_conn_str()
    if not cs:
        raise RuntimeError("POSTGRES_CONNECTION_STRING (or DATABASE_URL) is not configured")

    conn = psycopg2.connect(cs)
    conn.autocommit = True
    try:
        with conn.cursor() as cur:
            for statement in SCHEMA_SQL.split(";"):
                stmt = statement.strip()
                if stmt:
                    cur.execute(stmt)
            for row in seed_rows():
                cur.execute(SEED_SQL, row)
    finally:
        conn.close()

    logger.info("Schema ready: exercises, workouts, workout_splits")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    ensure_schema()
