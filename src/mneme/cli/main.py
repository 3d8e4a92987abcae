"""Main CLI entry point for Mneme."""

from typing import NoReturn

import typer
from dotenv import load_dotenv
from rich import print as rprint
from rich.panel import Panel
from rich.table import Table

from mneme.cli.helpers import configure_logging, console, get_database, get_scheduler
from mneme.core.errors import InvalidQuality, MnemeError, NotFound
from mneme.core.models import (
    CreateLanguageRequest,
    CreateVocabularyRequest,
    DueReview,
    Quality,
)
from mneme.core.scheduler import parse_quality
from mneme.core.storage import DEFAULT_SEARCH_LIMIT

load_dotenv()

app = typer.Typer(
    name="mneme",
    help="Vocabulary knowledge base with spaced-repetition review.",
    no_args_is_help=True,
)

language_app = typer.Typer(help="Manage languages.", no_args_is_help=True)
app.add_typer(language_app, name="language")

vocab_app = typer.Typer(help="Manage vocabulary items.", no_args_is_help=True)
app.add_typer(vocab_app, name="vocab")


@app.callback()
def main(
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to $MNEME_LOG_LEVEL or WARNING)",
    ),
) -> None:
    """Mneme command line."""
    try:
        configure_logging(log_level)
    except MnemeError as e:
        _fail(e)


def _fail(error: MnemeError) -> NoReturn:
    rprint(f"[red]{error}[/red]")
    raise typer.Exit(1)


def _format_ts(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


# ============================================================================
# LANGUAGE commands
# ============================================================================


@language_app.command("add")
def language_add(
    name: str = typer.Argument(..., help="Language name, e.g. Spanish"),
    code: str = typer.Argument(..., help="Language code, e.g. es"),
    flag: str = typer.Argument(..., help="Flag emoji"),
) -> None:
    """Add a language."""
    try:
        language = get_database().create_language(
            CreateLanguageRequest(name=name, code=code, flag_emoji=flag)
        )
    except MnemeError as e:
        _fail(e)
    rprint(
        f"[green]Added language {language.flag_emoji} {language.name} (id {language.id})[/green]"
    )


@language_app.command("list")
def language_list() -> None:
    """List languages."""
    try:
        languages = get_database().list_languages()
    except MnemeError as e:
        _fail(e)
    if not languages:
        rprint("[dim]No languages yet.[/dim]")
        return

    table = Table(title="Languages")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Flag")
    table.add_column("Name", style="cyan")
    table.add_column("Code")
    for language in languages:
        table.add_row(str(language.id), language.flag_emoji, language.name, language.code)
    console.print(table)


@language_app.command("delete")
def language_delete(
    language_id: int = typer.Argument(..., help="Language ID"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a language with all of its vocabulary."""
    if not yes:
        typer.confirm(
            f"Delete language {language_id} and all its vocabulary?", abort=True
        )
    try:
        get_database().delete_language(language_id)
    except MnemeError as e:
        _fail(e)
    rprint(f"[green]Deleted language {language_id}.[/green]")


# ============================================================================
# VOCAB commands
# ============================================================================


@vocab_app.command("add")
def vocab_add(
    language_id: int = typer.Argument(..., help="Owning language ID"),
    word: str = typer.Argument(..., help="Word or phrase"),
    translation: str = typer.Argument(..., help="Translation"),
    pronunciation: str | None = typer.Option(None, "--pronunciation", "-p"),
    example: str | None = typer.Option(None, "--example", "-e", help="Example sentence"),
    difficulty: int = typer.Option(1, "--difficulty", "-d", help="Difficulty level 1-5"),
) -> None:
    """Add a vocabulary item. It is due for review immediately."""
    try:
        item = get_database().create_vocabulary(
            CreateVocabularyRequest(
                language_id=language_id,
                word=word,
                translation=translation,
                pronunciation=pronunciation,
                example_sentence=example,
                difficulty_level=difficulty,
            )
        )
    except MnemeError as e:
        _fail(e)
    rprint(f"[green]Added '{item.word}' (id {item.id})[/green]")


def _print_items(items, title: str) -> None:
    table = Table(title=title)
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Word", style="cyan")
    table.add_column("Translation")
    table.add_column("Pronunciation", style="dim")
    table.add_column("Difficulty", justify="right")
    for item in items:
        table.add_row(
            str(item.id),
            item.word,
            item.translation,
            item.pronunciation or "",
            str(item.difficulty_level),
        )
    console.print(table)


@vocab_app.command("list")
def vocab_list(
    language_id: int = typer.Argument(..., help="Language ID"),
) -> None:
    """List a language's vocabulary, newest first."""
    try:
        db = get_database()
        language = db.get_language(language_id)
        if language is None:
            raise NotFound("Language", language_id)
        items = db.list_vocabulary(language_id)
    except MnemeError as e:
        _fail(e)

    if not items:
        rprint(f"[dim]No vocabulary for {language.name} yet.[/dim]")
        return
    _print_items(items, f"{language.flag_emoji} {language.name}")


@vocab_app.command("search")
def vocab_search(
    query: str = typer.Argument(..., help="Text to find in word, translation or example"),
    limit: int = typer.Option(DEFAULT_SEARCH_LIMIT, "--limit", "-l", min=1),
) -> None:
    """Search vocabulary across all languages."""
    try:
        items = get_database().search_vocabulary(query, limit)
    except MnemeError as e:
        _fail(e)
    if not items:
        rprint(f"[dim]No vocabulary found matching '{query}'[/dim]")
        return
    _print_items(items, f"Matches for '{query}'")


@vocab_app.command("delete")
def vocab_delete(
    item_id: int = typer.Argument(..., help="Vocabulary item ID"),
) -> None:
    """Delete a vocabulary item and its review card."""
    try:
        get_database().delete_vocabulary(item_id)
    except MnemeError as e:
        _fail(e)
    rprint(f"[green]Deleted vocabulary item {item_id}.[/green]")


# ============================================================================
# REVIEW commands
# ============================================================================


@app.command()
def due(
    limit: int | None = typer.Option(
        None,
        "--limit",
        "-l",
        min=0,
        help="Maximum cards to list (defaults to $MNEME_REVIEW_LIMIT or 20)",
    ),
) -> None:
    """List cards that are due for review."""
    try:
        entries = get_scheduler().get_due_reviews(limit=limit)
    except MnemeError as e:
        _fail(e)
    if not entries:
        rprint("[green]No cards due for review![/green]")
        return

    table = Table(title=f"Due Cards ({len(entries)})")
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Word", style="cyan")
    table.add_column("Translation")
    table.add_column("Due", style="yellow")
    table.add_column("Interval", justify="right")
    table.add_column("Ease", justify="right")
    table.add_column("Reps", justify="right")
    for entry in entries:
        table.add_row(
            str(entry.card.item_id),
            entry.item.word,
            entry.item.translation,
            _format_ts(entry.card.next_review),
            f"{entry.card.interval_days}d",
            f"{entry.card.ease_factor:.2f}",
            str(entry.card.repetitions),
        )
    console.print(table)


@app.command()
def review(
    limit: int | None = typer.Option(
        None,
        "--limit",
        "-l",
        min=0,
        help="Maximum cards to review (defaults to $MNEME_REVIEW_LIMIT or 20)",
    ),
) -> None:
    """Start an interactive review session."""
    try:
        scheduler = get_scheduler()
    except MnemeError as e:
        _fail(e)
    if limit is None:
        limit = scheduler.default_limit

    reviewed = 0
    while reviewed < limit:
        # Re-fetch every time so a card's due state is never stale.
        try:
            entries = scheduler.get_due_reviews(limit=limit - reviewed)
        except MnemeError as e:
            _fail(e)
        if not entries:
            break
        if reviewed == 0:
            rprint(f"\n[bold]Review Session[/bold]: {len(entries)} card(s) due\n")

        entry = entries[0]
        _show_front(entry, reviewed + 1, reviewed + len(entries))
        typer.prompt("\n[Press Enter to reveal answer]", default="", show_default=False)
        _show_back(entry)

        quality = _prompt_quality()
        if quality is None:
            rprint("\n[yellow]Session ended early.[/yellow]")
            break

        try:
            result = scheduler.submit_review(entry.card.item_id, quality)
        except MnemeError as e:
            _fail(e)
        rprint(
            f"[dim]Next review: {_format_ts(result.next_review)} "
            f"(in {result.interval_days} day(s))[/dim]\n"
        )
        reviewed += 1

    if reviewed == 0:
        rprint("[green]No cards due for review![/green]")
        return

    rprint("\n[bold green]Session complete![/bold green]")
    rprint(f"Reviewed {reviewed} card(s).")


def _show_front(entry: DueReview, position: int, total: int) -> None:
    body = entry.item.word
    if entry.item.pronunciation:
        body += f"\n[dim]{entry.item.pronunciation}[/dim]"
    console.print(Panel(body, title=f"Card {position}/{total}", border_style="blue"))


def _show_back(entry: DueReview) -> None:
    console.print(Panel(entry.item.translation, title="Translation", border_style="green"))
    if entry.item.example_sentence:
        rprint(f"[dim]Example: {entry.item.example_sentence}[/dim]")


def _prompt_quality() -> Quality | None:
    """Prompt user for recall quality."""
    rprint("\n[bold]How well did you recall it?[/bold]")
    rprint("  [red]1[/red] Hard  [green]3[/green] Good  [cyan]5[/cyan] Easy  [dim]q[/dim] Quit")

    while True:
        choice = typer.prompt("Quality", default="3")
        if choice.strip().lower() == "q":
            return None
        try:
            return parse_quality(int(choice))
        except (ValueError, InvalidQuality):
            rprint("[red]Invalid choice. Enter 1, 3, 5 or q to quit.[/red]")


# ============================================================================
# STATS / SERVE commands
# ============================================================================


@app.command()
def stats() -> None:
    """Show review statistics."""
    try:
        full = get_database().get_stats()
    except MnemeError as e:
        _fail(e)

    table = Table(title="Mneme Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")

    table.add_row("Vocabulary Items", str(full["total_items"]))
    table.add_row("Total Reviews", str(full["total_reviews"]))
    table.add_row("Due Now", str(full["due_now"]))
    table.add_row("New Cards", str(full["new_cards"]))
    table.add_row("Success Rate", f"{full['success_rate']:.0%}")

    by_language = full.get("by_language", {})
    if by_language:
        table.add_row("", "")
        table.add_row("[bold]By Language[/bold]", "")
        for name, count in by_language.items():
            table.add_row(f"  {name}", str(count))

    console.print(table)


@app.command()
def serve(
    port: int = typer.Option(
        8000,
        "--port",
        "-p",
        help="Port to run the server on",
    ),
    host: str = typer.Option(
        "127.0.0.1",
        "--host",
        "-h",
        help="Host to bind to",
    ),
    reload: bool = typer.Option(
        False,
        "--reload",
        "-r",
        help="Enable auto-reload for development",
    ),
) -> None:
    """Start the JSON API server."""
    import uvicorn

    rprint("\n[bold]Starting Mneme API server[/bold]")
    rprint(f"  URL: http://{host}:{port}")
    rprint(f"  Due reviews: http://{host}:{port}/reviews/due")
    rprint("\n[dim]Press Ctrl+C to stop[/dim]\n")

    uvicorn.run(
        "mneme.web.app:app",
        host=host,
        port=port,
        reload=reload,
    )
