"""Main entry point for the yamnet command line.

Sets up the Typer CLI application, performs dependency injection (Composition
Root), defines CLI commands, and delegates execution to the CommandHandler.
"""

import asyncio
import logging
from enum import Enum
from typing import Any, Callable, Coroutine, Optional

import typer
from typing_extensions import Annotated

from yamnet.core.command_handler import CommandHandler
from yamnet.core.yammer_client import YammerClient
from yamnet.domain.models.common import GroupId, MessageId, UserId
from yamnet.domain.models.errors import ConfigurationError
from yamnet.infrastructure.cli.display import ConsoleDisplay
from yamnet.infrastructure.config.settings import (
    get_access_token, get_config, get_endpoint, get_proxy, get_retry_policy,
    get_timeout, load_configuration,
)
from yamnet.infrastructure.monitoring.logger_setup import setup_logging

logger = logging.getLogger(__name__)

CommandAction = Callable[[CommandHandler], Coroutine[Any, Any, bool]]


class Feed(str, Enum):
    ALL = "all"
    FEED = "feed"
    TOP = "top"
    FOLLOWING = "following"
    SENT = "sent"
    PRIVATE = "private"
    RECEIVED = "received"


# --- Dependency Injection (Manual) ---

def create_client() -> YammerClient:
    """Builds a YammerClient from the loaded configuration.

    Raises:
        ConfigurationError: If the access token or retry settings are invalid.
    """
    load_configuration()
    return YammerClient(
        access_token=get_access_token(),
        endpoint=get_endpoint(),
        timeout=get_timeout(),
        proxy=get_proxy(),
        policy=get_retry_policy(),
    )


def create_display() -> ConsoleDisplay:
    return ConsoleDisplay()


def run_command(action: CommandAction) -> None:
    """Runs one async command against a fresh client and maps the result to an exit code.

    Exit codes: 0 success, 1 the request failed, 2 configuration error.
    """
    ui = create_display()
    try:
        client = create_client()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        ui.display_error(str(e))
        raise typer.Exit(code=2)

    async def _run() -> bool:
        async with client:
            return await action(CommandHandler(client, ui))

    if not asyncio.run(_run()):
        raise typer.Exit(code=1)


# --- Typer App Definition ---
app = typer.Typer(
    name="yamnet",
    help="yamnet: Yammer REST API client with resilient request execution.",
    add_completion=False,
)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """Configure logging before any command runs."""
    load_configuration()
    level = "DEBUG" if verbose else get_config("logging.level", "WARNING")
    setup_logging(
        log_level=level,
        log_file=get_config("logging.file"),
        log_format=get_config("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
    )


# --- CLI Commands ---

@app.command()
def messages(
    feed: Annotated[Feed, typer.Option("--feed", "-f", help="Which message feed to read.")] = Feed.FEED,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", min=1, max=20, help="Maximum number of messages.")] = None,
):
    """List messages from one of the feeds."""
    run_command(lambda handler: handler.handle_messages(feed.value, limit=limit))


@app.command()
def me():
    """Show the user the access token belongs to."""
    run_command(lambda handler: handler.handle_current_user())


@app.command()
def user(user_id: Annotated[int, typer.Argument(help="Numeric user id.")]):
    """Show a user profile."""
    run_command(lambda handler: handler.handle_user(UserId(user_id)))


@app.command()
def post(
    body: Annotated[str, typer.Argument(help="Message text.")],
    group_id: Annotated[Optional[int], typer.Option("--group-id", "-g", help="Post into this group.")] = None,
):
    """Post a new message."""
    run_command(lambda handler: handler.handle_post(body, group_id=GroupId(group_id) if group_id else None))


@app.command(name="join-group")
def join_group(group_id: Annotated[int, typer.Argument(help="Numeric group id.")]):
    """Join a group."""
    run_command(lambda handler: handler.handle_join_group(GroupId(group_id)))


@app.command(name="leave-group")
def leave_group(group_id: Annotated[int, typer.Argument(help="Numeric group id.")]):
    """Leave a group."""
    run_command(lambda handler: handler.handle_leave_group(GroupId(group_id)))


@app.command()
def like(message_id: Annotated[int, typer.Argument(help="Numeric message id.")]):
    """Like a message."""
    run_command(lambda handler: handler.handle_like(MessageId(message_id)))


@app.command()
def unlike(message_id: Annotated[int, typer.Argument(help="Numeric message id.")]):
    """Remove your like from a message."""
    run_command(lambda handler: handler.handle_unlike(MessageId(message_id)))


@app.command(name="delete-message")
def delete_message(message_id: Annotated[int, typer.Argument(help="Numeric message id.")]):
    """Delete one of your messages."""
    run_command(lambda handler: handler.handle_delete_message(MessageId(message_id)))


def cli_entry_point():
    """Function to be called by the script entry point in pyproject.toml."""
    app()


if __name__ == "__main__":
    cli_entry_point()
