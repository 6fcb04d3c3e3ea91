"""Database setup and connection management for the development events API."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import aiosqlite

from eventboard.config import Settings

# Overrides the configured location when set (tests point it at a temp file).
DATABASE_PATH: Path | None = None


def database_path() -> Path:
    """Return the database file, read from the environment on each call."""
    return DATABASE_PATH or Path(Settings().database_path)


EVENT_SELECT = """
    SELECT e.*, u.name AS creator_name, u.image AS creator_image
    FROM events e LEFT JOIN users u ON u.id = e.created_by
"""


async def get_db() -> aiosqlite.Connection:
    """Get a database connection with row factory enabled."""
    db = await aiosqlite.connect(database_path())
    db.row_factory = aiosqlite.Row
    await db.execute("PRAGMA journal_mode=WAL")
    await db.execute("PRAGMA foreign_keys=ON")
    return db


async def init_db() -> None:
    """Initialize database schema with users and events tables."""
    async with aiosqlite.connect(database_path()) as db:
        await db.executescript("""
            CREATE TABLE IF NOT EXISTS users (
                id INTEGER PRIMARY KEY,
                name TEXT NOT NULL,
                image TEXT
            );

            CREATE TABLE IF NOT EXISTS events (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                title TEXT NOT NULL,
                description TEXT NOT NULL DEFAULT '',
                image TEXT NOT NULL DEFAULT '',
                start_time TEXT NOT NULL,
                end_time TEXT NOT NULL,
                categories TEXT NOT NULL DEFAULT '[]',
                created_by INTEGER REFERENCES users(id) ON DELETE SET NULL
            );

            CREATE INDEX IF NOT EXISTS idx_events_start_time ON events(start_time);
        """)
        await db.commit()


def row_to_event(row: aiosqlite.Row) -> dict[str, Any]:
    """Shape a joined events row the way the REST API serves it."""
    created_by = None
    if row["creator_name"] is not None:
        created_by = {"name": row["creator_name"], "image": row["creator_image"]}
    return {
        "id": row["id"],
        "title": row["title"],
        "description": row["description"],
        "image": row["image"],
        "startTime": row["start_time"],
        "endTime": row["end_time"],
        "categories": json.loads(row["categories"] or "[]"),
        "createdBy": created_by,
    }
