import logging
from typing import Any, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.box import ROUNDED

from yamnet.domain.interfaces.user_interface import UserInterface
from yamnet.domain.models.envelope import ErrorInfo, ErrorKind
from yamnet.domain.models.message import Message
from yamnet.domain.models.user import UserBasicInfo

logger = logging.getLogger(__name__)

MAX_BODY_PREVIEW = 120

# Hints shown under a failure panel
FAILURE_HINTS = {
    ErrorKind.UNAUTHORIZED: "Check YAMMER_ACCESS_TOKEN; the token may be expired or revoked.",
    ErrorKind.RATE_LIMITED: "The API rate limit was hit; wait a minute before trying again.",
    ErrorKind.NETWORK_UNAVAILABLE: "The endpoint could not be resolved; check your connection or proxy.",
}


class ConsoleDisplay(UserInterface):
    """Concrete implementation of UserInterface using the rich library for console output."""

    def __init__(self, console: Console = None):
        self.console = console or Console()

    def display_messages(self, messages: Sequence[Message], **kwargs: Any) -> None:
        title = kwargs.get("title", "Messages")
        if not messages:
            self.display_info("No messages.")
            return

        table = Table(title=title, box=ROUNDED, show_lines=False)
        table.add_column("ID", style="cyan", no_wrap=True)
        table.add_column("Sender", style="magenta")
        table.add_column("Created", style="dim")
        table.add_column("Likes", justify="right")
        table.add_column("Body")

        for message in messages:
            body = (message.body.plain if message.body and message.body.plain else "").replace("\n", " ")
            if len(body) > MAX_BODY_PREVIEW:
                body = body[:MAX_BODY_PREVIEW] + "…"
            created = message.created_at.strftime("%Y-%m-%d %H:%M") if message.created_at else ""
            likes = str(message.liked_by.count) if message.liked_by else "0"
            table.add_row(str(message.id), str(message.sender_id or ""), created, likes, body)

        logger.debug(f"Rendering {len(messages)} messages")
        self.console.print(table)

    def display_user(self, user: UserBasicInfo, **kwargs: Any) -> None:
        table = Table(box=None, show_header=False)
        table.add_column("Field", style="bold cyan")
        table.add_column("Value")
        for label, value in (
            ("ID", user.id),
            ("Name", user.full_name or user.name),
            ("Username", user.name),
            ("Job title", user.job_title),
            ("State", user.state),
            ("Profile", user.web_url),
        ):
            if value is not None:
                table.add_row(label, str(value))
        self.console.print(Panel(table, title=kwargs.get("title", "User"), box=ROUNDED, border_style="cyan"))

    def display_failure(self, failure: ErrorInfo, **kwargs: Any) -> None:
        lines = [f"[bold]{failure.kind.value}[/bold]: {failure.message}"]
        if failure.attempts:
            lines.append(f"[dim]attempts: {failure.attempts}[/dim]")
        hint = FAILURE_HINTS.get(failure.kind)
        if hint:
            lines.append(f"[yellow]{hint}[/yellow]")
        self.console.print(Panel("\n".join(lines), title="Request failed", box=ROUNDED, border_style="red"))

    def display_error(self, error_message: str, **kwargs: Any) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {error_message}")

    def display_info(self, info_message: str, **kwargs: Any) -> None:
        self.console.print(f"[blue]Info:[/blue] {info_message}")
