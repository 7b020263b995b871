"""CLI entry point for notepatch."""

import asyncio
import json
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.syntax import Syntax

from notepatch import __version__
from notepatch.config.loader import load_config as load_config_file
from notepatch.engine.diff import generate_unified_diff
from notepatch.engine.plan import apply_proposal
from notepatch.engine.validator import validate
from notepatch.llm.prompts import build_note_chat_prompt
from notepatch.llm.reply_parser import parse_proposal
from notepatch.models.chat import NoteContext
from notepatch.models.config import Config
from notepatch.models.edit import EditProposal
from notepatch.services.edit_session import PatchService
from notepatch.services.exceptions import NotePatchError
from notepatch.services.note_store import FileNoteStore
from notepatch.utils.logging import configure_logging, get_logger


logger = get_logger(__name__)
console = Console()


def load_config(config_path: Optional[Path]) -> Config:
    """
    Load configuration, turning every failure into a user-facing error.

    Raises:
        click.ClickException: If config is missing or fails validation
    """
    try:
        config = load_config_file(config_path)
        logger.info("config_loaded", path=str(config_path) if config_path else None)
        return config
    except FileNotFoundError as e:
        logger.error("config_not_found", path=str(config_path) if config_path else None)
        raise click.ClickException(str(e))
    except Exception as e:
        logger.error("config_validation_error", error=str(e))
        raise click.ClickException(f"Configuration validation failed:\n{e}")


def read_proposal(proposal_file: Path) -> EditProposal:
    """
    Read a proposal from a file.

    The file may hold the bare JSON payload or a whole assistant reply with
    the payload in a fenced ```json block.

    Raises:
        click.ClickException: If no valid proposal can be read
    """
    text = proposal_file.read_text(encoding="utf-8")
    try:
        try:
            payload = json.loads(text)
        except json.JSONDecodeError:
            proposal = parse_proposal(text)
        else:
            proposal = validate(payload)
    except NotePatchError as e:
        raise click.ClickException(f"Invalid edit proposal: {e}")

    if proposal is None:
        raise click.ClickException(f"No edit proposal found in {proposal_file}")
    return proposal


def _show_preview(note_id: str, content: str, proposal: EditProposal) -> str:
    """Print the proposal's explanation and diff; return the proposed content."""
    try:
        new_content = apply_proposal(content, proposal)
    except NotePatchError as e:
        logger.info("preview_failed", document_id=note_id, error=str(e))
        raise click.ClickException(f"Proposal cannot be applied: {e}")

    diff = generate_unified_diff(content, new_content, fromfile=f"a/{note_id}", tofile=f"b/{note_id}")

    click.echo(proposal.explanation or "Here's the proposed update:")
    click.echo()
    if diff:
        console.print(Syntax(diff, "diff", theme="ansi_dark", background_color="default"))
    elif new_content != content:
        click.echo("(only trailing newline changes)")
    else:
        click.echo("(no changes)")
    return new_content


@click.group()
@click.version_option(version=__version__, prog_name="notepatch")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (default: ~/.config/notepatch/config.yaml)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path]):
    """notepatch: apply AI-proposed edits to your notes, with one-step undo."""
    configure_logging()
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command()
@click.argument("note_id")
@click.argument("proposal_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.pass_context
def preview(ctx: click.Context, note_id: str, proposal_file: Path):
    """
    Show what a proposal would change, without writing anything.

    Examples:
        notepatch preview groceries proposal.json
        notepatch preview groceries assistant-reply.md
    """
    logger.info("preview_command_started", document_id=note_id)
    config = load_config(ctx.obj["config_path"])
    store = FileNoteStore(Path(config.notes.directory))

    proposal = read_proposal(proposal_file)
    content = _load_note(store, note_id)
    _show_preview(note_id, content, proposal)


@cli.command()
@click.argument("note_id")
@click.argument("proposal_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--yes", "-y", is_flag=True, help="Apply without asking and skip the undo prompt")
@click.pass_context
def apply(ctx: click.Context, note_id: str, proposal_file: Path, yes: bool):
    """
    Apply a proposal to a note, then offer to undo it.

    Examples:
        notepatch apply groceries proposal.json
        notepatch apply groceries proposal.json --yes
    """
    logger.info("apply_command_started", document_id=note_id)
    config = load_config(ctx.obj["config_path"])
    store = FileNoteStore(Path(config.notes.directory))
    service = PatchService(store)

    proposal = read_proposal(proposal_file)
    content = _load_note(store, note_id)
    new_content = _show_preview(note_id, content, proposal)

    if new_content == content:
        click.echo("Nothing to apply.")
        return

    if not yes and not click.confirm("Apply this change?", default=True):
        click.echo("Discarded.")
        return

    try:
        result = asyncio.run(service.accept_proposal(note_id, content, proposal))
    except NotePatchError as e:
        raise click.ClickException(f"Update failed: {e}")
    click.echo("✓ Note updated")

    if yes or not click.confirm("Undo this change?", default=False):
        return

    try:
        asyncio.run(service.revert(result.record))
    except NotePatchError as e:
        raise click.ClickException(f"Undo failed: {e}")
    click.echo("↩ Change reverted")


@cli.command()
@click.argument("note_id")
@click.argument("message")
@click.option("--user", "user_name", default="there", show_default=True, help="Name the assistant addresses")
@click.option("--title", default=None, help="Note title (default: the note id)")
@click.pass_context
def prompt(ctx: click.Context, note_id: str, message: str, user_name: str, title: Optional[str]):
    """
    Print the assistant prompt for a message about a note.

    Example:
        notepatch prompt groceries "add oat milk to the list" --user Sam
    """
    config = load_config(ctx.obj["config_path"])
    store = FileNoteStore(Path(config.notes.directory))
    content = _load_note(store, note_id)

    note = NoteContext(document_id=note_id, title=title or note_id, content=content)
    click.echo(build_note_chat_prompt(
        note,
        user_name=user_name,
        message=message,
        max_note_chars=config.prompt.max_note_chars,
        history_messages=config.prompt.history_messages,
        assistant_name=config.prompt.assistant_name,
    ))


def _load_note(store: FileNoteStore, note_id: str) -> str:
    try:
        return asyncio.run(store.load_content(note_id))
    except (FileNotFoundError, ValueError) as e:
        logger.error("note_load_error", document_id=note_id, error=str(e))
        raise click.ClickException(str(e))


def main():
    """Main entry point for setuptools console script."""
    cli()


if __name__ == "__main__":
    main()
