"""Task Tracker CLI - Main entry point."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .config import settings
from .database import get_store
from .errors import MissingFieldError, StoreUnavailableError
from .schemas import (
    NoteCreate,
    NoteFilters,
    PersonCreate,
    TaskCreate,
    TaskFilters,
    TaskPatch,
    TaskRead,
    dump,
)
from .security.api_auth import hash_password
from .services import detect_svc, note_svc, person_svc, task_svc
from .services.stats_svc import compute_stats
from .storage.base import EntityStore

app = typer.Typer(
    name="tracker",
    help="Personal task, notes and people tracker",
    no_args_is_help=True,
)
console = Console()

notes_app = typer.Typer(help="Note commands")
people_app = typer.Typer(help="People commands")

app.add_typer(notes_app, name="notes")
app.add_typer(people_app, name="people")

PRIORITY_STYLES = {"urgent": "bold red", "high": "red", "medium": "yellow", "low": "dim"}


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """Configure logging for every command."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _store() -> EntityStore:
    store = get_store()
    store.create_all()
    return store


@contextmanager
def _errors() -> Iterator[None]:
    """Turn tracker errors into a red message and exit code 1."""
    try:
        yield
    except StoreUnavailableError as exc:
        console.print(f"[red]Store unavailable: {exc}[/red]")
        raise typer.Exit(1)
    except MissingFieldError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1)
    except ValidationError as exc:
        for err in exc.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()))
            console.print(f"[red]{loc}: {err.get('msg')}[/red]")
        raise typer.Exit(1)


def _split_tags(tags: str | None) -> list[str] | None:
    if tags is None:
        return None
    return [t.strip() for t in tags.split(",") if t.strip()]


def _output_json(result: Any) -> None:
    console.print_json(json.dumps(dump(result), default=str, ensure_ascii=False))


def _task_table(tasks: list[TaskRead], title: str) -> Table:
    table = Table(title=f"{title} ({len(tasks)})")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Status", style="white")
    table.add_column("Priority")
    table.add_column("Deadline", style="green")
    table.add_column("Tags", style="yellow")

    for t in tasks:
        priority_style = PRIORITY_STYLES.get(t.priority, "white")
        table.add_row(
            str(t.id),
            t.title,
            t.status,
            f"[{priority_style}]{t.priority}[/{priority_style}]",
            t.deadline.strftime("%Y-%m-%d %H:%M") if t.deadline else "-",
            ", ".join(t.tags) or "-",
        )
    return table


def _print_tasks(tasks: list[TaskRead], title: str, json_output: bool) -> None:
    if json_output:
        _output_json(tasks)
    else:
        console.print(_task_table(tasks, title))


# ============================================================================
# Task Commands
# ============================================================================


@app.command("list")
def tasks_list(
    status: str = typer.Option(None, "--status", "-s", help="todo / in-progress / done"),
    priority: str = typer.Option(None, "--priority", "-p", help="low / medium / high / urgent"),
    assigned_to: str = typer.Option(None, "--assigned-to", "-a", help="Person id, or 'unset'"),
    tag: str = typer.Option(None, "--tag", "-t", help="Only tasks carrying this tag"),
    by_priority: bool = typer.Option(False, "--by-priority", help="Rank by priority and deadline"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """List tasks, newest first."""
    with _errors():
        filters = TaskFilters(
            status=status,
            priority=priority,
            assigned_to=assigned_to,
            tag=tag,
            order="priority" if by_priority else None,
        )
        tasks = task_svc.list_tasks(_store(), filters, order=settings.default_order)
    _print_tasks(tasks, "Tasks", json_output)


@app.command("create")
def tasks_create(
    title: str = typer.Argument(..., help="Task title"),
    description: str = typer.Argument("", help="Task description"),
    priority: str = typer.Option(None, "--priority", "-p", help="low / medium / high / urgent"),
    deadline: str = typer.Option(None, "--deadline", "-d", help="YYYY-MM-DD or ISO datetime"),
    scheduled: str = typer.Option(None, "--scheduled", help="Scheduled date (YYYY-MM-DD)"),
    scheduled_time: str = typer.Option(None, "--scheduled-time", help="Scheduled time (HH:MM)"),
    duration: int = typer.Option(None, "--duration", help="Estimated duration in minutes"),
    assign: int = typer.Option(None, "--assign", "-a", help="Person id"),
    tags: str = typer.Option(None, "--tags", "-t", help="Comma-separated tags"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Create a new task."""
    with _errors():
        data = TaskCreate(
            title=title,
            description=description,
            priority=priority,
            deadline=deadline,
            scheduled_date=scheduled,
            scheduled_time=scheduled_time,
            estimated_duration=duration,
            assigned_to=assign,
            tags=_split_tags(tags),
            source="cli",
        )
        task = task_svc.create_task(_store(), data)

    if json_output:
        _output_json(task)
    else:
        console.print(f"[green]Created task #{task.id}:[/green] {task.title}")


@app.command("update")
def tasks_update(
    task_id: int = typer.Argument(..., help="Task ID"),
    title: str = typer.Option(None, "--title", help="New title"),
    description: str = typer.Option(None, "--description", help="New description"),
    status: str = typer.Option(None, "--status", "-s", help="todo / in-progress / done"),
    priority: str = typer.Option(None, "--priority", "-p", help="low / medium / high / urgent"),
    deadline: str = typer.Option(None, "--deadline", "-d", help="YYYY-MM-DD or ISO datetime"),
    scheduled: str = typer.Option(None, "--scheduled", help="Scheduled date (YYYY-MM-DD)"),
    scheduled_time: str = typer.Option(None, "--scheduled-time", help="Scheduled time (HH:MM)"),
    duration: int = typer.Option(None, "--duration", help="Estimated duration in minutes"),
    assign: int = typer.Option(None, "--assign", "-a", help="Person id"),
    tags: str = typer.Option(None, "--tags", "-t", help="Comma-separated tags (replaces existing)"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Update fields on a task. Only the options given are changed."""
    fields = {
        "title": title,
        "description": description,
        "status": status,
        "priority": priority,
        "deadline": deadline,
        "scheduled_date": scheduled,
        "scheduled_time": scheduled_time,
        "estimated_duration": duration,
        "assigned_to": assign,
        "tags": _split_tags(tags),
    }
    with _errors():
        patch = TaskPatch(**{k: v for k, v in fields.items() if v is not None})
        task = task_svc.update_task(_store(), task_id, patch)

    if not task:
        console.print(f"[red]Task {task_id} not found[/red]")
        raise typer.Exit(1)
    if json_output:
        _output_json(task)
    else:
        console.print(f"[green]Updated task #{task.id}[/green]")


@app.command("done")
def tasks_done(task_id: int = typer.Argument(..., help="Task ID")):
    """Mark a task as done."""
    with _errors():
        task = task_svc.update_task(_store(), task_id, TaskPatch(status="done"))
    if not task:
        console.print(f"[red]Task {task_id} not found[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Completed task #{task.id}:[/green] {task.title}")


@app.command("delete")
def tasks_delete(task_id: int = typer.Argument(..., help="Task ID")):
    """Delete a task."""
    with _errors():
        deleted = task_svc.delete_task(_store(), task_id)
    if not deleted:
        console.print(f"[red]Task {task_id} not found[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Deleted task #{task_id}[/green]")


@app.command("search")
def tasks_search(
    query: str = typer.Argument("", help="Text to look for in title or description"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Search tasks by title or description."""
    with _errors():
        tasks = task_svc.search_tasks(_store(), query)
    _print_tasks(tasks, f"Tasks matching '{query}'", json_output)


@app.command("remind")
def tasks_remind(
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Show open tasks due today or tomorrow, or scheduled for today."""
    with _errors():
        tasks = task_svc.tasks_needing_reminder(_store())
    _print_tasks(tasks, "Tasks needing reminder", json_output)


@app.command("stats")
def tasks_stats(
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Show task and note counts."""
    with _errors():
        result = compute_stats(_store())

    if json_output:
        _output_json(result)
        return

    table = Table(title="Tracker Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    table.add_row("Total tasks", str(result.total))
    table.add_row("To do", str(result.todo))
    table.add_row("In progress", str(result.in_progress))
    table.add_row("Done", str(result.done))
    table.add_row("Overdue", f"[red]{result.overdue}[/red]" if result.overdue else "0")
    table.add_row("Notes", str(result.total_notes))
    table.add_row("People", str(result.total_people))
    console.print(table)


@app.command("detect")
def tasks_detect(
    text: str = typer.Argument(..., help="Free text to scan"),
    create: bool = typer.Option(False, "--create", help="Create the task if one is detected"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Check whether free text reads like a task."""
    with _errors():
        store = _store()
        suggestion = detect_svc.detect_task_from_text(text, person_svc.list_people(store))

    if json_output:
        _output_json(suggestion)
    else:
        console.print(
            Panel(
                f"Task: {'[green]yes[/green]' if suggestion.is_task else '[dim]no[/dim]'}\n"
                f"Title: {suggestion.title or '-'}\n"
                f"Priority: {suggestion.priority}\n"
                f"Assigned to: {suggestion.assigned_to or '-'}\n"
                f"Deadline mentioned: {'yes' if suggestion.deadline_detected else 'no'}",
                title="Detection",
            )
        )

    if create and suggestion.is_task:
        with _errors():
            task = task_svc.create_task(
                store,
                TaskCreate(
                    title=suggestion.title,
                    priority=suggestion.priority,
                    assigned_to=suggestion.assigned_to,
                    source="cli",
                ),
            )
        console.print(f"[green]Created task #{task.id}[/green]")


@app.command("backup")
def backup():
    """Copy the store next to itself."""
    with _errors():
        path = _store().backup()
    console.print(f"[green]Backup created:[/green] {path}")


# ============================================================================
# Note Commands
# ============================================================================


@notes_app.command("list")
def notes_list(
    category: str = typer.Option(None, "--category", "-c", help="Only this category"),
    created_from: str = typer.Option(None, "--from", help="Created on or after (YYYY-MM-DD or ISO datetime)"),
    created_to: str = typer.Option(None, "--to", help="Created on or before (YYYY-MM-DD covers the whole day)"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """List notes, newest first."""
    with _errors():
        filters = NoteFilters(category=category, created_from=created_from, created_to=created_to)
        notes = note_svc.list_notes(_store(), filters)

    if json_output:
        _output_json(notes)
        return

    table = Table(title=f"Notes ({len(notes)})")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Title", style="cyan")
    table.add_column("Category", style="yellow")
    table.add_column("Content")
    for n in notes:
        content = n.content if len(n.content) <= 60 else n.content[:57] + "..."
        table.add_row(str(n.id), n.title, n.category, content)
    console.print(table)


@notes_app.command("add")
def notes_add(
    title: str = typer.Argument(..., help="Note title"),
    content: str = typer.Argument(..., help="Note body"),
    category: str = typer.Option(None, "--category", "-c", help="Category (default: general)"),
    tags: str = typer.Option(None, "--tags", "-t", help="Comma-separated tags"),
):
    """Add a note."""
    with _errors():
        note = note_svc.create_note(
            _store(),
            NoteCreate(
                title=title,
                content=content,
                category=category,
                tags=_split_tags(tags),
                source="cli",
            ),
        )
    console.print(f"[green]Created note #{note.id}:[/green] {note.title}")


@notes_app.command("search")
def notes_search(
    query: str = typer.Argument("", help="Text to look for in title or content"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Search notes by title or content."""
    with _errors():
        notes = note_svc.search_notes(_store(), query)

    if json_output:
        _output_json(notes)
        return
    for n in notes:
        console.print(f"[cyan]#{n.id} {n.title}[/cyan] [dim]({n.category})[/dim]\n  {n.content}")
    if not notes:
        console.print("[dim]No matching notes[/dim]")


@notes_app.command("delete")
def notes_delete(note_id: int = typer.Argument(..., help="Note ID")):
    """Delete a note."""
    with _errors():
        deleted = note_svc.delete_note(_store(), note_id)
    if not deleted:
        console.print(f"[red]Note {note_id} not found[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Deleted note #{note_id}[/green]")


# ============================================================================
# People Commands
# ============================================================================


@people_app.command("list")
def people_list(
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """List people alphabetically."""
    with _errors():
        people = person_svc.list_people(_store())

    if json_output:
        _output_json(people)
        return

    table = Table(title=f"People ({len(people)})")
    table.add_column("ID", style="dim", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Role", style="yellow")
    table.add_column("Email", style="white")
    table.add_column("Phone", style="green")
    for p in people:
        table.add_row(str(p.id), p.name, p.role or "-", p.email or "-", p.phone or "-")
    console.print(table)


@people_app.command("show")
def people_show(
    identifier: str = typer.Argument(..., help="Person id, exact name, or email"),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
):
    """Show one person."""
    with _errors():
        person = person_svc.find_person(_store(), identifier)
    if not person:
        console.print(f"[red]Person {identifier} not found[/red]")
        raise typer.Exit(1)

    if json_output:
        _output_json(person)
        return
    console.print(
        Panel(
            f"Role: {person.role or '-'}\n"
            f"Email: {person.email or '-'}\n"
            f"Phone: {person.phone or '-'}\n"
            f"Notes: {person.notes or '-'}",
            title=f"#{person.id} {person.name}",
        )
    )


@people_app.command("add")
def people_add(
    name: str = typer.Argument(..., help="Name as it appears in messages"),
    role: str = typer.Option(None, "--role", "-r", help="Role"),
    email: str = typer.Option(None, "--email", "-e", help="Email address"),
    phone: str = typer.Option(None, "--phone", "-p", help="Phone number"),
):
    """Add a person."""
    with _errors():
        person = person_svc.create_person(
            _store(), PersonCreate(name=name, role=role, email=email, phone=phone)
        )
    console.print(f"[green]Added person #{person.id}:[/green] {person.name}")


@people_app.command("delete")
def people_delete(person_id: int = typer.Argument(..., help="Person ID")):
    """Delete a person. Tasks assigned to them keep the dangling id."""
    with _errors():
        deleted = person_svc.delete_person(_store(), person_id)
    if not deleted:
        console.print(f"[red]Person {person_id} not found[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Deleted person #{person_id}[/green]")


# ============================================================================
# Server Commands
# ============================================================================


@app.command("hash-password")
def hash_password_cmd(password: str = typer.Argument(..., help="Password to hash")):
    """Print a PBKDF2 hash for use in TRACKER_BASIC_USERS."""
    console.print(hash_password(password), soft_wrap=True)


@app.command("serve")
def serve(
    port: int = typer.Option(settings.port, "--port", "-p", help="Port to run on"),
    host: str = typer.Option(settings.host, "--host", help="Host to bind to"),
    reload: bool = typer.Option(False, "--reload", help="Reload on code changes"),
):
    """Launch the tracker API server."""
    import uvicorn

    if settings.auth_enabled and not (settings.api_keys_set or settings.basic_users_map):
        console.print(
            "[yellow]No credentials configured: set TRACKER_API_KEYS or "
            "TRACKER_BASIC_USERS, every /api request will be rejected.[/yellow]"
        )
    console.print(f"[bold cyan]Starting Task Tracker at http://{host}:{port}[/bold cyan]")
    uvicorn.run("tracker.app:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
