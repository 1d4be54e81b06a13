"""Interactive CLI application."""
from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from mastery_tracker.catalog import get_default_catalog, get_subjects_for_track, load_catalog
from mastery_tracker.config import configure_logging, get_settings
from mastery_tracker.dashboard import (
    calc_readiness_score, get_lifecycle_stage, get_mastery_stats,
    get_readiness_color, get_readiness_label, get_subject_scores,
)
from mastery_tracker.db import init_db
from mastery_tracker.effort import compute_effort
from mastery_tracker.mastery import apply_decay
from mastery_tracker.models import CORRECT, NATURAL_SCIENCE, SOCIAL_SCIENCE, WRONG
from mastery_tracker.review import (
    LOCKED, MASTERED, READY, REVIEW, get_curriculum_map, get_next_focus, get_weak_concepts,
)
from mastery_tracker.scheduling import get_due_concepts
from mastery_tracker.store import (
    create_learner, get_average_effort, get_learner, get_mastery_record,
    learner_exists, record_practice, reset_learner,
)

console = Console()

STATUS_STYLES = {MASTERED: "green", READY: "cyan", REVIEW: "red", LOCKED: "dim"}
EXIT_WORDS = ("q", "menu")


class SessionExitRequested(Exception):
    """Raised when the user leaves a command from inside a prompt."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, **kwargs) -> int:
    return int(session_prompt(prompt, **kwargs))


def show_welcome(name: str, track: str):
    console.print(Panel(
        f"[bold]Welcome back, {name}[/bold]\n[dim]{track} track[/dim]",
        title="Mastery Tracker", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("practice", "Log a practice attempt"),
        ("due", "Concepts due for review"),
        ("map", "Curriculum map with unlock status"),
        ("next", "What to study next"),
        ("dashboard", "Readiness score + progress"),
        ("reset", "Clear all mastery data"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")
    console.print("  [dim]Type q or menu at any prompt to go back.[/dim]")


def setup_learner(db_path: str, learner_id: str):
    console.print("[dim]Setting up for first use...[/dim]")
    name = Prompt.ask("Your name", default="Scholar")
    track = Prompt.ask("Track", choices=[NATURAL_SCIENCE, SOCIAL_SCIENCE], default=NATURAL_SCIENCE)
    learner = create_learner(db_path, learner_id, name, track)
    console.print("[green]Ready![/green]\n")
    return learner


def show_empty_track(track: str):
    console.print(f"[yellow]The catalog has no concepts for the {track} track.[/yellow]")


def run_practice(db_path: str, learner_id: str, catalog, node) -> None:
    console.print(Panel(
        f"{node.topic}\n[dim]{node.description}[/dim]",
        title=f"{node.subject} · {node.difficulty}", border_style="cyan",
    ))
    correct = session_prompt("Was your final answer correct?", choices=["y", "n"])
    seconds = session_int_prompt("Seconds spent on the question", default="15")
    revisions = session_int_prompt("Times you changed your answer", default="0")
    is_correct = correct == "y"
    effort = compute_effort(seconds, revisions, is_correct)
    mastery = record_practice(
        db_path, learner_id, node.id, CORRECT if is_correct else WRONG, effort, catalog=catalog,
    )
    console.print(
        f"[bold]Effort {effort:.2f}[/bold]  |  Retention {mastery.retention_score:.0%}  |  "
        f"Level {mastery.adaptive_level}/5  |  Next review {mastery.scheduled_next_review:%Y-%m-%d %H:%M}"
    )


def cmd_practice(db_path: str, learner_id: str, catalog):
    learner = get_learner(db_path, learner_id)
    nodes = catalog.find_nodes_for_track(learner.track)
    record = get_mastery_record(db_path, learner_id)
    focus = get_next_focus(record, catalog, datetime.now(), nodes=nodes)
    if focus is None:
        show_empty_track(learner.track)
        return
    focus, status = focus
    for i, node in enumerate(nodes, 1):
        marker = " ←" if node.id == focus.id else ""
        console.print(f"  [cyan]{i:>2}[/cyan]) {node.subject}: {node.topic}{marker}")
    default = str(nodes.index(focus) + 1)
    choice = session_int_prompt("Concept", choices=[str(i) for i in range(1, len(nodes) + 1)], default=default)
    run_practice(db_path, learner_id, catalog, nodes[choice - 1])


def cmd_due(db_path: str, learner_id: str, catalog):
    now = datetime.now()
    record = get_mastery_record(db_path, learner_id)
    due = get_due_concepts(record, catalog, now)
    if not due:
        console.print("[green]Nothing due right now![/green]")
        return
    table = Table(title="Due for Review")
    table.add_column("Concept", style="cyan")
    table.add_column("Retention", justify="right")
    table.add_column("Interval", justify="right")
    table.add_column("Due since")
    for m in due:
        table.add_row(m.topic, f"{m.retention_score:.0%}", f"{m.interval:g}d", f"{m.scheduled_next_review:%Y-%m-%d %H:%M}")
    console.print(table)


def cmd_map(db_path: str, learner_id: str, catalog):
    learner = get_learner(db_path, learner_id)
    record = apply_decay(get_mastery_record(db_path, learner_id), datetime.now())
    rows = get_curriculum_map(record, catalog, nodes=catalog.find_nodes_for_track(learner.track))
    table = Table(title=f"{learner.track} Curriculum")
    table.add_column("Subject")
    table.add_column("Concept", style="cyan")
    table.add_column("Difficulty")
    table.add_column("Retention", justify="right")
    table.add_column("Level", justify="right")
    table.add_column("Status")
    for row in rows:
        style = STATUS_STYLES[row["status"]]
        table.add_row(
            row["subject"],
            row["topic"],
            row["difficulty"],
            f"{row['retention_score']:.0%}" if row["retention_score"] is not None else "-",
            str(row["adaptive_level"] or "-"),
            f"[{style}]{row['status']}[/{style}]",
        )
    console.print(table)


def cmd_next(db_path: str, learner_id: str, catalog):
    learner = get_learner(db_path, learner_id)
    record = get_mastery_record(db_path, learner_id)
    focus = get_next_focus(record, catalog, datetime.now(), nodes=catalog.find_nodes_for_track(learner.track))
    if focus is None:
        show_empty_track(learner.track)
        return
    node, status = focus
    style = STATUS_STYLES[status]
    console.print(Panel(
        f"[bold]{node.topic}[/bold] ({node.subject})\n{node.description}\n[{style}]{status}[/{style}]",
        title="Next Focus", border_style="magenta",
    ))
    if status == LOCKED:
        missing = ", ".join(n.topic for n in catalog.prerequisites_of(node.id))
        console.print(f"[dim]Unlock it by strengthening: {missing}[/dim]")
    elif Prompt.ask("Practice it now?", choices=["y", "n"], default="y") == "y":
        run_practice(db_path, learner_id, catalog, node)


def cmd_dashboard(db_path: str, learner_id: str, catalog):
    learner = get_learner(db_path, learner_id)
    record = apply_decay(get_mastery_record(db_path, learner_id), datetime.now())
    effort = get_average_effort(db_path, learner_id)
    score = calc_readiness_score(record, catalog, effort)
    label = get_readiness_label(score)
    color = get_readiness_color(score)
    stage = get_lifecycle_stage(record, catalog, effort)
    stats = get_mastery_stats(db_path, learner_id)

    console.print(Panel(f"[bold]{learner.name}[/bold] · {stage}", title="Readiness Dashboard", border_style="blue"))

    bar_filled = int(score / 5)
    bar_empty = 20 - bar_filled
    bar = f"[{color}]{'█' * bar_filled}{'░' * bar_empty}[/{color}]"
    console.print(f"\n  Overall Readiness: [bold]{score}%[/bold] {bar} [{color}]{label}[/{color}]\n")

    subject_scores = get_subject_scores(record, catalog, get_subjects_for_track(learner.track))
    table = Table(title="Subject Breakdown")
    table.add_column("Subject", style="cyan")
    table.add_column("Practised", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Status")
    for ss in subject_scores:
        sc_color = get_readiness_color(ss["score"])
        table.add_row(
            ss["subject"],
            f"{ss['practised']}/{ss['concepts']}",
            f"{ss['score']}%",
            f"[{sc_color}]{ss['label']}[/{sc_color}]",
        )
    console.print(table)

    console.print(f"\n  Concepts: [bold]{stats['concepts_practised']}[/bold]  |  "
                  f"Reviews: [bold]{stats['reviews_logged']}[/bold]  |  "
                  f"Accuracy: [bold]{stats['accuracy']}%[/bold]  |  "
                  f"Effort: [bold]{stats['average_effort']:.0%}[/bold]  |  "
                  f"Due: [bold]{stats['due_now']}[/bold]")

    weak = get_weak_concepts(record)
    if weak:
        console.print("\n[bold]Weakest concepts:[/bold]")
        for w in weak[:5]:
            console.print(f"  [red]{w['retention_score']:.0%}[/red] — {w['topic']} ({w['errors']}/{w['reviews']} wrong)")


def cmd_reset(db_path: str, learner_id: str, catalog):
    if session_prompt("Delete all mastery data?", choices=["y", "n"], default="n") == "y":
        reset_learner(db_path, learner_id)
        console.print("[yellow]Mastery data cleared.[/yellow]")


COMMANDS = {
    "practice": cmd_practice,
    "due": cmd_due,
    "map": cmd_map,
    "next": cmd_next,
    "dashboard": cmd_dashboard,
    "reset": cmd_reset,
}


def main():
    settings = get_settings()
    configure_logging(settings.log_level)
    db_path = settings.db_path
    learner_id = settings.learner_id
    init_db(db_path)
    catalog = load_catalog(settings.catalog_path) if settings.catalog_path else get_default_catalog()

    if learner_exists(db_path, learner_id):
        learner = get_learner(db_path, learner_id)
    else:
        learner = setup_learner(db_path, learner_id)

    show_welcome(learner.name, learner.track)

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="next").strip().lower()
        try:
            if choice in COMMANDS:
                COMMANDS[choice](db_path, learner_id, catalog)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]Keep the streak going![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except SessionExitRequested:
            console.print("[dim]Back to menu.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except Exception as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
