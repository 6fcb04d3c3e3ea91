"""Seed the development database from a json-server style JSON document."""

import json
import logging
from pathlib import Path
from typing import Any

from eventboard.models import EventPayload, dedupe

from . import database

logger = logging.getLogger(__name__)


def resolve_categories(raw: dict[str, Any], names: dict[Any, str]) -> list[str]:
    """Category labels of a seed event.

    Events either list labels directly under ``categories`` or reference a
    top-level ``categories`` table through ``categoryIds``.
    """
    labels = raw.get("categories")
    if isinstance(labels, list):
        return dedupe([str(label) for label in labels])
    ids = raw.get("categoryIds") or []
    return dedupe([names[i] for i in ids if i in names])


async def ingest_events(path: Path) -> int:
    """Read *path* and upsert its users and events into SQLite.

    Returns the number of events processed.
    """
    if not path.exists():
        logger.warning(f"Seed file {path} does not exist")
        return 0

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    users = data.get("users", [])
    table = data.get("categories", [])
    names = {c["id"]: c["name"] for c in table if isinstance(c, dict)}
    user_ids = {user["id"] for user in users}

    count = 0
    db = await database.get_db()
    try:
        for user in users:
            await db.execute(
                """
                INSERT INTO users (id, name, image) VALUES (?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    name = excluded.name,
                    image = excluded.image
                """,
                (user["id"], user.get("name", ""), user.get("image")),
            )

        for raw in data.get("events", []):
            payload = EventPayload(
                title=raw["title"],
                description=raw.get("description", ""),
                image=raw.get("image", ""),
                start_time=raw["startTime"],
                end_time=raw["endTime"],
                categories=resolve_categories(raw, names),
            )
            created_by = raw.get("createdBy")
            if not isinstance(created_by, int) or created_by not in user_ids:
                created_by = None

            await db.execute(
                """
                INSERT INTO events (
                    id, title, description, image, start_time, end_time,
                    categories, created_by
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title = excluded.title,
                    description = excluded.description,
                    image = excluded.image,
                    start_time = excluded.start_time,
                    end_time = excluded.end_time,
                    categories = excluded.categories,
                    created_by = excluded.created_by
                """,
                (
                    raw.get("id"),
                    payload.title,
                    payload.description,
                    payload.image,
                    payload.start_time.isoformat(),
                    payload.end_time.isoformat(),
                    json.dumps(payload.categories),
                    created_by,
                ),
            )
            count += 1

        await db.commit()
    finally:
        await db.close()

    logger.info(f"Seeded {len(users)} user(s) and {count} event(s) from {path}")
    return count
