"""Command-line interface for booklend.

Built with Typer for commands and Rich for output.
"""

from datetime import date, timedelta
from typing import Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from . import __version__
from .config import get_config
from .db import get_db
from .db.schemas import BookCreate, OwnerCreate
from .exceptions import LendingError
from .utils.clock import utcnow

# Create the main app
app = typer.Typer(
    name="booklend",
    help="Track books you lend out and get reminded when they are due.",
    no_args_is_help=True,
)

# Create sub-apps for command groups
owner_app = typer.Typer(help="Manage book owners.")
app.add_typer(owner_app, name="owner")
book_app = typer.Typer(help="Manage books.")
app.add_typer(book_app, name="book")
loans_app = typer.Typer(help="Inspect loans.")
app.add_typer(loans_app, name="loans")
prefs_app = typer.Typer(help="Owner reminder preferences.")
app.add_typer(prefs_app, name="prefs")
reminders_app = typer.Typer(help="Run or schedule reminder sweeps.")
app.add_typer(reminders_app, name="reminders")

# Rich console for pretty output
console = Console()


# ============================================================================
# Helper Functions
# ============================================================================


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[bold red]Error:[/bold red] {message}")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[bold green]Success:[/bold green] {message}")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[bold yellow]Warning:[/bold yellow] {message}")


def _format_dt(value) -> str:
    return value.strftime("%Y-%m-%d %H:%M") if value else "-"


# ============================================================================
# Basic Commands
# ============================================================================


@app.command()
def version() -> None:
    """Show the booklend version."""
    console.print(f"booklend {__version__}")


@app.command("init-db")
def init_db() -> None:
    """Create the database tables."""
    config = get_config()
    errors = config.validate()
    if errors:
        for error in errors:
            print_error(error)
        raise typer.Exit(1)
    get_db()
    print_success(f"Database ready at {config.db_path}")


# ============================================================================
# Owners and Books
# ============================================================================


@owner_app.command("add")
def owner_add(
    name: str = typer.Argument(..., help="Owner name"),
    email: str = typer.Argument(..., help="Address reminders are sent to"),
) -> None:
    """Add an owner."""
    try:
        owner = get_db().create_owner(OwnerCreate(name=name, email=email))
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)
    print_success(f"Added owner {owner.name} ({owner.id})")


@owner_app.command("list")
def owner_list() -> None:
    """List owners."""
    owners = get_db().list_owners()
    if not owners:
        console.print("[dim]No owners found[/dim]")
        return

    table = Table(title="Owners", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Email")
    for owner in owners:
        table.add_row(owner.id, owner.name, owner.email)
    console.print(table)


@book_app.command("add")
def book_add(
    owner_id: str = typer.Argument(..., help="Owning user ID"),
    title: str = typer.Argument(..., help="Book title"),
    author: Optional[str] = typer.Option(None, "--author", "-a", help="Author"),
    isbn: Optional[str] = typer.Option(None, "--isbn", "-i", help="ISBN"),
) -> None:
    """Add a book to an owner's collection."""
    try:
        book = get_db().create_book(
            BookCreate(owner_id=owner_id, title=title, author=author, isbn=isbn)
        )
    except ValueError as e:
        print_error(str(e))
        raise typer.Exit(1)
    print_success(f"Added {book.title} ({book.id})")


@book_app.command("list")
def book_list(
    owner_id: Optional[str] = typer.Option(None, "--owner", "-o", help="Filter by owner"),
) -> None:
    """List books."""
    books = get_db().list_books(owner_id=owner_id)
    if not books:
        console.print("[dim]No books found[/dim]")
        return

    table = Table(title="Books", show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim")
    table.add_column("Title", style="cyan", max_width=40)
    table.add_column("Author", style="green", max_width=25)
    for book in books:
        table.add_row(book.id, book.title, book.author or "-")
    console.print(table)


# ============================================================================
# Lending Commands
# ============================================================================


@app.command()
def lend(
    book_id: str = typer.Argument(..., help="Book ID to lend"),
    owner_id: str = typer.Argument(..., help="Owning user ID"),
    borrower: str = typer.Argument(..., help="Who the book is lent to"),
    due: Optional[str] = typer.Option(None, "--due", "-d", help="Due date (YYYY-MM-DD)"),
    days: Optional[int] = typer.Option(None, "--days", help="Due in this many days"),
) -> None:
    """Lend a book to someone."""
    from pydantic import ValidationError

    from .lending import LendingManager, LoanCreate

    if due and days is not None:
        print_error("Use either --due or --days, not both")
        raise typer.Exit(1)

    due_date = None
    if due:
        try:
            due_date = date.fromisoformat(due)
        except ValueError:
            print_error(f"Invalid due date format: {due}")
            raise typer.Exit(1)
    elif days is not None:
        due_date = utcnow().date() + timedelta(days=days)

    manager = LendingManager(get_db())
    try:
        loan = manager.create_loan(
            LoanCreate(
                book_id=book_id,
                owner_id=owner_id,
                borrower_name=borrower,
                due_date=due_date,
            )
        )
    except (LendingError, ValidationError) as e:
        print_error(str(e))
        raise typer.Exit(1)

    print_success(f"Book lent to {loan.borrower_name} ({loan.id})")
    if due_date:
        console.print(f"[dim]Due: {due_date}[/dim]")


@app.command("return")
def return_book(
    loan_id: str = typer.Argument(..., help="Loan ID to return"),
) -> None:
    """Mark a loan as returned."""
    from .lending import LendingManager

    manager = LendingManager(get_db())
    try:
        loan = manager.return_loan(loan_id)
    except LendingError as e:
        print_error(str(e))
        raise typer.Exit(1)

    if not loan:
        print_error("Loan not found")
        raise typer.Exit(1)
    print_success("Loan marked as returned")


def _reminder_label(loan, now, cooldown) -> str:
    from .reminders import ReminderState, reminder_state

    state = reminder_state(loan.returned_at, loan.last_reminder_sent_at, now, cooldown)
    last_sent = loan.last_reminder_sent_at
    if state == ReminderState.CLOSED:
        return "-"
    if state == ReminderState.ACTIVE_REMINDED:
        return f"[yellow]sent {_format_dt(last_sent)}[/yellow]"
    return "[dim]due[/dim]" if last_sent is None else f"[dim]last {_format_dt(last_sent)}[/dim]"


def _loan_table(loans, title: str) -> Table:
    db = get_db()
    now = utcnow()
    cooldown = timedelta(hours=get_config().reminder_cooldown_hours)
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("ID", style="dim", max_width=8)
    table.add_column("Book", style="cyan", max_width=30)
    table.add_column("Borrower")
    table.add_column("Lent")
    table.add_column("Due")
    table.add_column("Status")
    table.add_column("Reminder")

    for loan in loans:
        book = db.get_book(loan.book_id)
        if not loan.is_active:
            status_str = "[dim]returned[/dim]"
        elif loan.is_overdue:
            status_str = f"[bold red]OVERDUE ({loan.days_overdue}d)[/bold red]"
        elif loan.due_at:
            status_str = f"[green]active ({loan.days_until_due}d)[/green]"
        else:
            status_str = "[green]active[/green]"

        table.add_row(
            loan.id[:8],
            book.title if book else "Unknown",
            loan.borrower_name,
            _format_dt(loan.lent_at),
            loan.due_at.date().isoformat() if loan.due_at else "-",
            status_str,
            _reminder_label(loan, now, cooldown),
        )
    return table


@loans_app.command("list")
def loans_list(
    owner_id: Optional[str] = typer.Option(None, "--owner", "-o", help="Filter by owner"),
    active: bool = typer.Option(False, "--active", "-a", help="Show only active loans"),
    overdue: bool = typer.Option(False, "--overdue", help="Show only overdue loans"),
) -> None:
    """List loan records."""
    from .lending import LendingManager

    loans = LendingManager(get_db()).list_loans(
        owner_id=owner_id,
        active_only=active,
        overdue_only=overdue,
    )
    if not loans:
        console.print("[dim]No loans found[/dim]")
        return
    console.print(_loan_table(loans, "Loans"))


@loans_app.command("history")
def loans_history(
    book_id: str = typer.Argument(..., help="Book ID"),
) -> None:
    """Show every loan of one book."""
    from .lending import LendingManager

    loans = LendingManager(get_db()).get_loan_history_for_book(book_id)
    if not loans:
        console.print("[dim]No loans found[/dim]")
        return
    console.print(_loan_table(loans, "Loan history"))


@loans_app.command("stats")
def loans_stats(
    owner_id: Optional[str] = typer.Option(None, "--owner", "-o", help="Filter by owner"),
) -> None:
    """Show lending statistics."""
    from .lending import LendingManager

    stats = LendingManager(get_db()).get_stats(owner_id=owner_id)
    console.print(Panel(
        f"Total loans: {stats.total_loans}\n"
        f"Currently lent: {stats.currently_lent}\n"
        f"[bold red]Overdue: {stats.overdue}[/bold red]\n"
        f"Returned: {stats.returned}",
        title="Lending",
    ))


# ============================================================================
# Preferences
# ============================================================================


def _print_preferences(prefs) -> None:
    def flag(value: bool) -> str:
        return "[green]on[/green]" if value else "[red]off[/red]"

    suffix = " [dim](defaults)[/dim]" if prefs.is_default else ""
    console.print(Panel(
        f"Email reminders: {flag(prefs.email_reminders_enabled)}\n"
        f"Upcoming due:    {flag(prefs.email_upcoming_enabled)}\n"
        f"Overdue:         {flag(prefs.email_overdue_enabled)}",
        title=f"Preferences for {prefs.owner_id}{suffix}",
    ))


@prefs_app.command("show")
def prefs_show(
    owner_id: str = typer.Argument(..., help="Owner ID"),
) -> None:
    """Show an owner's reminder preferences."""
    from .settings import PreferencesManager

    _print_preferences(PreferencesManager(get_db()).get_preferences(owner_id))


@prefs_app.command("set")
def prefs_set(
    owner_id: str = typer.Argument(..., help="Owner ID"),
    reminders: Optional[bool] = typer.Option(
        None, "--reminders/--no-reminders", help="Master switch for reminder e-mails"
    ),
    upcoming: Optional[bool] = typer.Option(
        None, "--upcoming/--no-upcoming", help="E-mail before a book is due"
    ),
    overdue: Optional[bool] = typer.Option(
        None, "--overdue/--no-overdue", help="E-mail digest of overdue books"
    ),
) -> None:
    """Change an owner's reminder preferences."""
    from .settings import PreferencesManager, PreferencesUpdate

    db = get_db()
    if db.get_owner(owner_id) is None:
        print_error("Owner not found")
        raise typer.Exit(1)

    prefs = PreferencesManager(db).update_preferences(
        owner_id,
        PreferencesUpdate(
            email_reminders_enabled=reminders,
            email_upcoming_enabled=upcoming,
            email_overdue_enabled=overdue,
        ),
    )
    _print_preferences(prefs)


@prefs_app.command("reset")
def prefs_reset(
    owner_id: str = typer.Argument(..., help="Owner ID"),
) -> None:
    """Return an owner's preferences to the defaults."""
    from .settings import PreferencesManager

    if PreferencesManager(get_db()).reset_preferences(owner_id):
        print_success("Preferences reset to defaults")
    else:
        console.print("[dim]Preferences already at defaults[/dim]")


# ============================================================================
# Reminders
# ============================================================================


def _print_sweep(result) -> None:
    if result.skipped:
        print_warning("A sweep is already running; nothing was done")
        return

    table = Table(title="Reminder sweep", show_header=True, header_style="bold magenta")
    table.add_column("Phase")
    table.add_column("Sent", justify="right", style="green")
    table.add_column("Failed", justify="right", style="red")
    table.add_column("Loans", justify="right")
    table.add_row(
        "Upcoming due",
        str(result.upcoming_sent),
        str(result.upcoming_failed),
        str(result.upcoming_sent),
    )
    table.add_row(
        "Overdue digests",
        str(result.overdue_digests_sent),
        str(result.overdue_digests_failed),
        str(result.overdue_loans_covered),
    )
    console.print(table)
    for error in result.errors:
        print_error(error)


@reminders_app.command("run")
def reminders_run() -> None:
    """Run one reminder sweep now."""
    from .reminders import build_engine

    config = get_config()
    engine = build_engine(get_db(), config)
    if not engine.notifier.is_configured():
        print_warning("SMTP is not configured; every send will fail and nothing will be marked")

    _print_sweep(engine.run_sweep())


@reminders_app.command("serve")
def reminders_serve(
    startup_run: Optional[bool] = typer.Option(
        None, "--startup-run/--no-startup-run", help="Sweep once before waiting for the schedule"
    ),
) -> None:
    """Run reminder sweeps on the daily schedule until interrupted."""
    from .reminders import build_engine
    from .scheduler import ReminderScheduler

    config = get_config()
    driver = ReminderScheduler(build_engine(get_db(), config), config)
    console.print(
        f"[dim]Sweeping daily at {config.sweep_hour:02d}:{config.sweep_minute:02d} UTC. "
        "Press Ctrl+C to stop.[/dim]"
    )
    try:
        driver.start(run_on_startup=startup_run)
    except (KeyboardInterrupt, SystemExit):
        driver.shutdown(wait=False)
        console.print("[dim]Scheduler stopped[/dim]")


if __name__ == "__main__":
    app()
