"""Command-line interface for the Gamplo client."""

import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Awaitable, Callable, Optional

import click

from gamplo.config import load_config
from gamplo.exceptions import GamploError
from gamplo.models import ChatMessage
from gamplo.sdk import GamploSDK

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def _run(ctx: click.Context, action: Callable[[GamploSDK], Awaitable[None]], **sdk_kwargs) -> None:
    """Build an SDK from the group options, initialize it and run `action`."""
    options = ctx.obj

    async def main() -> None:
        sdk = GamploSDK(
            config=options["config"],
            token=options["token"],
            session_id=options["session"],
            **sdk_kwargs,
        )
        async with sdk:
            await action(sdk)

    try:
        asyncio.run(main())
    except GamploError as e:
        raise click.ClickException(str(e))


def _require_session(sdk: GamploSDK) -> None:
    if not sdk.get_session_id():
        raise click.ClickException(
            "Not authenticated. Pass --token, --session or set GAMPLO_TOKEN."
        )


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default="gamplo.yaml",
    help="Path to config YAML file",
)
@click.option("--token", envvar="GAMPLO_TOKEN", help="Gamplo token to authenticate with")
@click.option("--session", help="Existing session id")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Path, token: Optional[str], session: Optional[str], verbose: bool):
    """Gamplo - command-line client for the Gamplo game platform."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.obj = {
        "config": load_config(config_path),
        "token": token,
        "session": session,
    }


@cli.command()
@click.pass_context
def auth(ctx: click.Context):
    """Exchange the token for a session and print it."""

    async def action(sdk: GamploSDK) -> None:
        _require_session(sdk)
        click.echo(f"Session: {sdk.get_session_id()}")
        player = await sdk.get_player()
        if player:
            click.echo(f"Player: {player.display_name} (@{player.username})")

    _run(ctx, action)


@cli.command()
@click.pass_context
def player(ctx: click.Context):
    """Show the authenticated player."""

    async def action(sdk: GamploSDK) -> None:
        _require_session(sdk)
        current = await sdk.get_player()
        if current is None:
            click.echo("No player")
            return
        click.echo(json.dumps(current.model_dump(by_alias=True), indent=2))

    _run(ctx, action)


@cli.command()
@click.pass_context
def achievements(ctx: click.Context):
    """List the game's achievements."""

    async def action(sdk: GamploSDK) -> None:
        _require_session(sdk)
        items = await sdk.get_achievements()

        click.echo(f"\nAchievements ({len(items)}):")
        for item in items:
            mark = "x" if item.unlocked else " "
            click.echo(f"  [{mark}] {item.key}: {item.title} ({item.points} pts)")

    _run(ctx, action)


@cli.command()
@click.argument("key")
@click.pass_context
def unlock(ctx: click.Context, key: str):
    """Unlock an achievement by KEY."""

    async def action(sdk: GamploSDK) -> None:
        _require_session(sdk)
        result = await sdk.unlock_achievement(key)
        if result.already_unlocked:
            click.echo(f"Already unlocked: {result.achievement.title}")
        else:
            click.echo(f"Unlocked: {result.achievement.title} (+{result.achievement.points} pts)")

    _run(ctx, action)


@cli.command()
@click.argument("room", type=int)
@click.argument("message")
@click.pass_context
def send(ctx: click.Context, room: int, message: str):
    """Send MESSAGE to chat ROOM."""

    async def action(sdk: GamploSDK) -> None:
        _require_session(sdk)
        result = await sdk.send_message(room, message)
        click.echo("Sent" if result.success else "Not sent")

    _run(ctx, action)


@cli.command()
@click.argument("rooms", type=int, nargs=-1, required=True)
@click.option(
    "--duration",
    type=float,
    default=None,
    help="Stop after this many seconds (default: run until interrupted)",
)
@click.pass_context
def listen(ctx: click.Context, rooms: tuple[int, ...], duration: Optional[float]):
    """Print live chat messages from one or more ROOMS."""

    def on_failure(room_id: int, error: BaseException) -> None:
        click.echo(f"[{room_id}] gave up reconnecting: {error}", err=True)

    async def action(sdk: GamploSDK) -> None:
        _require_session(sdk)

        for room_id in rooms:

            def on_message(message: ChatMessage, room_id: int = room_id) -> None:
                click.echo(f"[{room_id}] {message.display_name}: {message.message}")

            sdk.connect_to_chat(room_id, on_message)

        logger.info(f"Listening to {len(rooms)} room(s): {list(rooms)}")
        try:
            if duration is None:
                await asyncio.Event().wait()
            else:
                await asyncio.sleep(duration)
        finally:
            sdk.disconnect_all_chat()

    try:
        _run(ctx, action, on_chat_failure=on_failure)
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, disconnecting")
        sys.exit(0)


if __name__ == "__main__":
    cli()
