"""CLI entry-point: python -m eventboard [list|show|add|edit|delete|serve]."""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional

import typer

from eventboard.config import Settings, configure_logging
from eventboard.controller import EventController
from eventboard.models import Event
from eventboard.sinks import NoticeKind, Severity
from eventboard.store import EventStore

app = typer.Typer(help="Event Board – browse and manage events")


class ConsoleNotifier:
    """Prints notifications the way a toast would show them."""

    def notify(self, message: str, severity: Severity, kind: NoticeKind) -> None:
        color = typer.colors.GREEN if kind is NoticeKind.SUCCESS else typer.colors.RED
        if severity is Severity.WARNING:
            color = typer.colors.YELLOW
        typer.secho(message, fg=color, err=kind is NoticeKind.ERROR)


def _run(action: Callable[[EventController], Awaitable[bool]]) -> None:
    settings = Settings()
    configure_logging(settings)

    async def main() -> bool:
        controller = EventController(
            EventStore(settings), notifier=ConsoleNotifier(), settings=settings
        )
        try:
            return await action(controller)
        finally:
            await controller.aclose()

    if not asyncio.run(main()):
        raise typer.Exit(1)


def _echo_event(event: Event, detailed: bool = False) -> None:
    typer.secho(f"[{event.id}] {event.title}", bold=True)
    typer.echo(f"  Start: {event.start_time:%Y-%m-%d %H:%M}")
    typer.echo(f"  End:   {event.end_time:%Y-%m-%d %H:%M}")
    if event.categories:
        typer.echo(f"  Categories: {', '.join(event.categories)}")
    if detailed:
        typer.echo(f"  Image: {event.image}")
        typer.echo(f"\n  {event.description}\n")
        if event.created_by:
            typer.echo(f"  Created by: {event.created_by.name}")


def _fill_draft(controller: EventController, fields: dict[str, Optional[str]]) -> None:
    for name, value in fields.items():
        if value is not None:
            controller.set_field(name, value)


@app.command(name="list")
def list_events(
    search: str = typer.Option("", "--search", "-q", help="Match in titles."),
    category: Optional[str] = typer.Option(
        None, "--category", "-c", help="Only events with this category."
    ),
) -> None:
    """List events, optionally filtered."""

    async def action(controller: EventController) -> bool:
        if not await controller.refresh():
            return False
        controller.set_search(search)
        state = controller.select_category(category)
        if not state.visible:
            typer.echo("No events found.")
        for event in state.visible:
            _echo_event(event)
        return True

    _run(action)


@app.command()
def categories() -> None:
    """List every category in use."""

    async def action(controller: EventController) -> bool:
        if not await controller.refresh():
            return False
        for label in controller.state.categories:
            typer.echo(f"  {label}")
        return True

    _run(action)


@app.command()
def show(event_id: str = typer.Argument(help="Event id")) -> None:
    """Show one event in full."""

    async def action(controller: EventController) -> bool:
        event = await controller.open_event(event_id)
        if event is None:
            return False
        _echo_event(event, detailed=True)
        return True

    _run(action)


@app.command()
def add(
    title: str = typer.Option(..., prompt=True),
    description: str = typer.Option(..., prompt=True),
    image: str = typer.Option(..., prompt="Image URL"),
    start: str = typer.Option(..., prompt="Start time (YYYY-MM-DDTHH:MM)"),
    end: str = typer.Option(..., prompt="End time (YYYY-MM-DDTHH:MM)"),
    categories: str = typer.Option(
        "", prompt="Categories (comma separated)", help="e.g. music, outdoor"
    ),
) -> None:
    """Add a new event."""

    async def action(controller: EventController) -> bool:
        await controller.refresh()
        controller.open_create()
        _fill_draft(
            controller,
            {
                "title": title,
                "description": description,
                "image": image,
                "start_time": start,
                "end_time": end,
                "categories": categories,
            },
        )
        return await controller.save()

    _run(action)


@app.command()
def edit(
    event_id: str = typer.Argument(help="Event id"),
    title: Optional[str] = typer.Option(None),
    description: Optional[str] = typer.Option(None),
    image: Optional[str] = typer.Option(None),
    start: Optional[str] = typer.Option(None, help="YYYY-MM-DDTHH:MM"),
    end: Optional[str] = typer.Option(None, help="YYYY-MM-DDTHH:MM"),
    categories: Optional[str] = typer.Option(None, help="Comma separated"),
) -> None:
    """Edit an event; fields not given keep their current value."""

    async def action(controller: EventController) -> bool:
        if not await controller.refresh():
            return False
        if not controller.open_edit(event_id).dialog.is_open:
            return False
        _fill_draft(
            controller,
            {
                "title": title,
                "description": description,
                "image": image,
                "start_time": start,
                "end_time": end,
                "categories": categories,
            },
        )
        return await controller.save()

    _run(action)


@app.command()
def delete(
    event_id: str = typer.Argument(help="Event id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation."),
) -> None:
    """Delete an event after confirmation."""
    if not yes:
        typer.confirm(
            "Are you sure you want to delete this event? "
            "This action cannot be undone.",
            abort=True,
        )

    async def action(controller: EventController) -> bool:
        await controller.refresh()
        controller.open_delete(event_id)
        return await controller.confirm_delete()

    _run(action)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", help="Bind address."),
    port: int = typer.Option(3000, help="Bind port."),
) -> None:
    """Run the development events API."""
    import uvicorn

    configure_logging(Settings())
    uvicorn.run("api.main:app", host=host, port=port)


if __name__ == "__main__":
    app()
