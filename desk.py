#!/usr/bin/env python3
"""
taskdesk - Command Line Interface
Chat with the agent layer and inspect tasks from the terminal
"""

import sys
from pathlib import Path

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent))

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from taskdesk.core import Config, DatabaseStorage, MemoryStorage, Storage, get_database
from taskdesk.agents import AgentOrchestrator, OrchestratorResult
from taskdesk.agents.task_ops import list_tasks as fetch_tasks
from taskdesk.integrations import WhatsAppTransport
from taskdesk.llm import LLMClient

# Initialize CLI app and console
app = typer.Typer(help="taskdesk - Conversational task manager")

console = Console()
config = Config()

# Lazy-loaded collaborators (initialized on first use)
_storage: Optional[Storage] = None
_orchestrator: Optional[AgentOrchestrator] = None

STATUS_ICONS = {
    "pending": "[white]○ pending[/white]",
    "in-progress": "[yellow]◐ in progress[/yellow]",
    "review": "[blue]◎ review[/blue]",
    "completed": "[green]✓ completed[/green]",
}
PRIORITY_STYLES = {"high": "[red]high[/red]", "medium": "[yellow]medium[/yellow]", "low": "[dim]low[/dim]"}


def get_storage() -> Storage:
    """
    Get or initialize the Storage instance.

    Falls back to in-memory storage when the SQLite file has not been
    created yet (or when TASKDESK_STORAGE=memory).
    """
    global _storage
    if _storage is None:
        if os.environ.get("TASKDESK_STORAGE", "").lower() == "memory":
            _storage = MemoryStorage()
        else:
            try:
                _storage = DatabaseStorage(get_database(config.get_database_path()))
            except FileNotFoundError as e:
                console.print(f"[yellow]{e}[/yellow]")
                console.print("[dim]Using in-memory storage for this session.[/dim]")
                _storage = MemoryStorage()
    return _storage


def get_orchestrator() -> AgentOrchestrator:
    """
    Get or initialize the AgentOrchestrator.

    Uses lazy loading so the task and stats commands never need an
    OpenAI key.
    """
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = AgentOrchestrator(
            get_storage(),
            LLMClient.from_config(config),
            config,
            transport=WhatsAppTransport.from_env(),
        )
    return _orchestrator


def format_result(result: OrchestratorResult) -> None:
    """
    Display an OrchestratorResult using Rich console.

    Args:
        result: The normalized orchestrator result
    """
    if result.action == "error":
        console.print(f"[red]✗[/red] {result.message}")
    else:
        console.print(f"[green]✓[/green] {result.message}")

    if isinstance(result.data, list) and result.data and isinstance(result.data[0], dict) \
            and "title" in result.data[0]:
        console.print()
        console.print(_task_table(result.data))

    console.print(f"[dim]{result.agent_used or 'orchestrator'} · {result.action or 'respond'}[/dim]")


def _task_table(tasks: List[Dict[str, Any]]) -> Table:
    table = Table(show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Task", min_width=30)
    table.add_column("Priority", justify="center", width=8)
    table.add_column("Due", width=12)
    table.add_column("Status", width=14)

    for task in tasks:
        priority = task.get("priority") or "-"
        deadline = task.get("deadline")
        table.add_row(
            str(task.get("id", "")),
            task.get("title", ""),
            PRIORITY_STYLES.get(priority, priority),
            deadline[:10] if deadline else "-",
            STATUS_ICONS.get(task.get("status"), task.get("status", "")),
        )
    return table


@app.command()
def ask(
    query: str = typer.Argument(..., help="Natural language request"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show routing logs"),
):
    """
    Process a natural language request through the agent system

    Examples:
      desk ask "I need to do the accounting, due March 27"
      desk ask "Show me my upcoming deadlines"
      desk ask "Find out the weather in Madrid and send it to Ana"
    """
    if verbose:
        logging.basicConfig(level=logging.INFO)
    try:
        result = asyncio.run(get_orchestrator().process(query))
        format_result(result)
    except Exception as e:
        console.print(f"[red]Error processing request: {e}[/red]")
        raise typer.Exit(1)


@app.command()
def chat(
    session: str = typer.Option("cli", "--session", help="Conversation session id"),
):
    """
    Start an interactive chat session

    Follow-ups ("what date is that due?", "yes") refer to the last task
    of this session. Type 'exit', 'quit', or 'bye' to end the session.
    """
    console.print(Panel(
        "[bold cyan]taskdesk chat[/bold cyan]\n\n"
        "Manage tasks, categories, plans, projects and WhatsApp messages in plain language.\n"
        "Type [bold]'exit'[/bold], [bold]'quit'[/bold], or [bold]'bye'[/bold] to end the session.",
        border_style="cyan"
    ))
    console.print()

    orchestrator = get_orchestrator()
    exit_commands = {"exit", "quit", "bye", "q"}

    async def loop():
        while True:
            try:
                user_input = console.input("[bold green]>[/bold green] ").strip()
            except KeyboardInterrupt:
                console.print("\n[dim]Use 'exit' to quit[/dim]")
                continue
            except EOFError:
                console.print("\n[dim]Goodbye![/dim]")
                return

            if not user_input:
                continue
            if user_input.lower() in exit_commands:
                console.print("[dim]Goodbye![/dim]")
                return
            if user_input.lower() == "clear":
                console.clear()
                continue

            result = await orchestrator.process(user_input, session_id=session)
            console.print()
            format_result(result)
            console.print()

    asyncio.run(loop())


@app.command("tasks")
def list_tasks(
    status: Optional[str] = typer.Option(None, "--status", "-s", help="Filter by status (pending, in-progress, review, completed)"),
    category: Optional[int] = typer.Option(None, "--category", "-c", help="Filter by category id"),
):
    """
    List tasks

    Examples:
      desk tasks
      desk tasks --status pending
      desk tasks --category 2
    """
    try:
        tasks = asyncio.run(fetch_tasks(get_storage(), status=status, category_id=category))
    except Exception as e:
        console.print(f"[red]Error listing tasks: {e}[/red]")
        raise typer.Exit(1)

    if not tasks:
        console.print("[yellow]No tasks found[/yellow]")
        return

    console.print(f"\n[bold]Tasks ({len(tasks)}):[/bold]\n")
    console.print(_task_table([task.to_dict() for task in tasks]))
    console.print()


@app.command()
def stats():
    """Show task statistics"""
    try:
        task_stats = asyncio.run(get_storage().get_task_stats())
    except Exception as e:
        console.print(f"[red]Error fetching statistics: {e}[/red]")
        raise typer.Exit(1)

    console.print("\n[bold]Task Statistics:[/bold]\n")
    console.print(f"  Total tasks: {task_stats.total}")
    console.print(f"  ✓ Completed: {task_stats.completed}")
    console.print(f"  ○ Pending: {task_stats.pending}")
    console.print(f"  ◐ In progress: {task_stats.in_progress}")
    console.print(f"  ◎ Review: {task_stats.review}")

    if task_stats.total > 0:
        completion_rate = (task_stats.completed / task_stats.total) * 100
        console.print(f"\n  Completion rate: {completion_rate:.1f}%")

    console.print()


if __name__ == "__main__":
    app()
