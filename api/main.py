"""Development events API: the REST contract the client consumes, over SQLite."""

import json
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware

from eventboard.config import Settings
from eventboard.models import EventPayload

from . import database
from .ingest import ingest_events

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await database.init_db()
    settings = Settings()
    if settings.seed_file:
        await ingest_events(Path(settings.seed_file))
    yield


app = FastAPI(title="Event Board API", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


async def _fetch_event(db, event_id: int) -> dict:
    cursor = await db.execute(
        f"{database.EVENT_SELECT} WHERE e.id = ?", (event_id,)
    )
    row = await cursor.fetchone()
    if not row:
        raise HTTPException(status_code=404, detail="Event not found")
    return database.row_to_event(row)


def _columns(payload: EventPayload) -> tuple:
    return (
        payload.title,
        payload.description,
        payload.image,
        payload.start_time.isoformat(),
        payload.end_time.isoformat(),
        json.dumps(payload.categories),
    )


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.get("/events")
async def list_events():
    """List all events in insertion order."""
    db = await database.get_db()
    try:
        cursor = await db.execute(f"{database.EVENT_SELECT} ORDER BY e.id ASC")
        rows = await cursor.fetchall()
        return [database.row_to_event(row) for row in rows]
    finally:
        await db.close()


@app.get("/events/{event_id}")
async def get_event(event_id: int):
    """Get a single event by ID, including its creator."""
    db = await database.get_db()
    try:
        return await _fetch_event(db, event_id)
    finally:
        await db.close()


@app.post("/events", status_code=201)
async def create_event(payload: EventPayload):
    db = await database.get_db()
    try:
        cursor = await db.execute(
            """
            INSERT INTO events (
                title, description, image, start_time, end_time, categories
            ) VALUES (?, ?, ?, ?, ?, ?)
            """,
            _columns(payload),
        )
        await db.commit()
        event_id = cursor.lastrowid
        logger.info(f"Created event {event_id}")
        return await _fetch_event(db, event_id)
    finally:
        await db.close()


@app.put("/events/{event_id}")
async def update_event(event_id: int, payload: EventPayload):
    db = await database.get_db()
    try:
        cursor = await db.execute(
            """
            UPDATE events SET
                title = ?, description = ?, image = ?,
                start_time = ?, end_time = ?, categories = ?
            WHERE id = ?
            """,
            _columns(payload) + (event_id,),
        )
        if cursor.rowcount == 0:
            raise HTTPException(status_code=404, detail="Event not found")
        await db.commit()
        return await _fetch_event(db, event_id)
    finally:
        await db.close()


@app.delete("/events/{event_id}", status_code=204)
async def delete_event(event_id: int):
    db = await database.get_db()
    try:
        cursor = await db.execute("DELETE FROM events WHERE id = ?", (event_id,))
        if cursor.rowcount == 0:
            raise HTTPException(status_code=404, detail="Event not found")
        await db.commit()
        logger.info(f"Deleted event {event_id}")
        return Response(status_code=204)
    finally:
        await db.close()
