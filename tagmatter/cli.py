"""
CLI interface for tag synchronization.

Usage:
    tagmatter sync notes/
    tagmatter sync --check notes/
    tagmatter tags notes/today.md
    tagmatter watch notes/
    tagmatter config lowercase_tags false
"""

import json
import os
import signal
import sys
import threading
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from .config import (
    SETTING_NAMES,
    Settings,
    config_path,
    get_config_dir,
    load_or_create_settings,
    save_settings,
    set_setting,
)
from .logging_config import (
    configure_ops_log,
    configure_quiet_mode,
    enable_debug_mode,
    remove_handler,
)
from .scheduler import SyncCoordinator
from .sync import tag_state
from .types import FAILED, UNCHANGED, UPDATED, SyncOutcome
from .vault import FileDocumentSource, iter_markdown_files, sync_file
from .watcher import PollingWatcher


# Configure quiet mode by default
# Set TAGMATTER_VERBOSE=1 to enable debug mode via environment
if os.environ.get("TAGMATTER_VERBOSE") == "1":
    enable_debug_mode()
else:
    configure_quiet_mode(quiet=True)


def _version_callback(value: bool):
    if value:
        from importlib.metadata import version
        print(f"tagmatter {version('tagmatter')}")
        raise typer.Exit()


def _verbose_callback(value: bool):
    if value:
        enable_debug_mode()


# Global state for CLI options
_json_output = False


def _json_callback(value: bool):
    global _json_output
    _json_output = value


def _get_json_output() -> bool:
    return _json_output


def _config_dir_callback(value: Optional[Path]):
    # Exported so the error log lands next to the config
    if value is not None:
        os.environ["TAGMATTER_CONFIG_DIR"] = str(value)


app = typer.Typer(
    name="tagmatter",
    help="Sync inline #hashtags into Markdown front matter.",
    no_args_is_help=True,
    rich_markup_mode=None,
)


@app.callback()
def main_callback(
    verbose: Annotated[bool, typer.Option(
        "--verbose", "-v",
        help="Enable debug-level logging to stderr",
        callback=_verbose_callback,
        is_eager=True,
    )] = False,
    output_json: Annotated[bool, typer.Option(
        "--json", "-j",
        help="Output as JSON",
        callback=_json_callback,
        is_eager=True,
    )] = False,
    version: Annotated[Optional[bool], typer.Option(
        "--version",
        help="Show version and exit",
        callback=_version_callback,
        is_eager=True,
    )] = None,
    config_dir: Annotated[Optional[Path], typer.Option(
        "--config-dir",
        envvar="TAGMATTER_CONFIG_DIR",
        help="Directory holding tagmatter.toml (default: ~/.tagmatter/)",
        callback=_config_dir_callback,
        is_eager=True,
    )] = None,
):
    """Sync inline #hashtags into Markdown front matter."""


# -----------------------------------------------------------------------------
# Common Options
# -----------------------------------------------------------------------------

LowercaseOption = Annotated[
    Optional[bool],
    typer.Option(
        "--lowercase/--no-lowercase",
        help="Lowercase inline tags (default: lowercase_tags setting)"
    )
]


def _get_settings() -> Settings:
    """Load settings, creating the config file on first use."""
    try:
        return load_or_create_settings(get_config_dir())
    except (OSError, ValueError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


def _format_value(value) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _format_outcome(outcome: SyncOutcome, dry_run: bool = False) -> str:
    """One line per changed document: 'updated path +new -old'."""
    verb = "would update" if dry_run else "updated"
    changes = [f"+{t}" for t in outcome.added] + [f"-{t}" for t in outcome.removed]
    line = f"{verb} {outcome.id}"
    if changes:
        line += "  " + " ".join(changes)
    return line


# -----------------------------------------------------------------------------
# Commands
# -----------------------------------------------------------------------------

@app.command("sync")
def sync_cmd(
    paths: Annotated[list[Path], typer.Argument(
        help="Markdown files or directories (searched recursively)"
    )],
    check: Annotated[bool, typer.Option(
        "--check",
        help="Report out-of-date files without writing; exit 1 if any"
    )] = False,
    lowercase: LowercaseOption = None,
):
    """
    Sync the front matter tag list of each file with its inline tags.

    \b
    Examples:
        tagmatter sync notes/                # Every .md file under notes/
        tagmatter sync today.md              # One file
        tagmatter sync --check notes/        # CI: fail if anything is stale
    """
    settings = _get_settings()
    lower = settings.lowercase_tags if lowercase is None else lowercase

    try:
        files = iter_markdown_files(paths)
    except FileNotFoundError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    source = FileDocumentSource()
    outcomes = [sync_file(source, str(path), lower, dry_run=check) for path in files]

    updated = [o for o in outcomes if o.status == UPDATED]
    failed = [o for o in outcomes if o.status == FAILED]
    unchanged = sum(1 for o in outcomes if o.status == UNCHANGED)

    if _get_json_output():
        typer.echo(json.dumps([o.to_dict() for o in outcomes], indent=2))
    else:
        for outcome in updated:
            typer.echo(_format_outcome(outcome, dry_run=check))
        for outcome in failed:
            typer.echo(f"failed {outcome.id}: {outcome.error}", err=True)
        verb = "out of date" if check else "updated"
        summary = f"{len(updated)} {verb}, {unchanged} unchanged"
        if failed:
            summary += f", {len(failed)} failed"
        typer.echo(summary, err=True)

    if failed or (check and updated):
        raise typer.Exit(1)


@app.command("tags")
def tags_cmd(
    file: Annotated[Path, typer.Argument(help="Markdown file")],
    lowercase: LowercaseOption = None,
):
    """Show inline and recorded tags of a file."""
    settings = _get_settings()
    lower = settings.lowercase_tags if lowercase is None else lowercase

    try:
        document = FileDocumentSource().read(str(file))
    except (OSError, UnicodeDecodeError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    state = tag_state(document, lower)
    if _get_json_output():
        typer.echo(json.dumps({
            "inline": state.inline,
            "recorded": state.recorded,
            "added": state.added,
            "removed": state.removed,
            "in_sync": state.in_sync,
        }, indent=2))
        return

    typer.echo(f"inline: {', '.join(state.inline)}")
    typer.echo(f"recorded: {', '.join(state.recorded)}")
    if state.in_sync:
        typer.echo("status: in sync")
    else:
        changes = [f"+{t}" for t in state.added] + [f"-{t}" for t in state.removed]
        typer.echo(f"status: out of sync ({' '.join(changes)})")


@app.command()
def watch(
    directory: Annotated[Path, typer.Argument(help="Directory of Markdown files")],
    interval: Annotated[float, typer.Option(
        "--interval", "-i",
        min=0.05,
        help="Seconds between scans"
    )] = 1.0,
    delay: Annotated[Optional[float], typer.Option(
        "--delay",
        min=0.0,
        help="Seconds to wait after the last change (default: debounce_seconds setting)"
    )] = None,
):
    """
    Watch a directory and sync files as they change.

    Changes are debounced per file. Runs until Ctrl-C.
    Requires the auto_sync setting (on by default).
    """
    settings = _get_settings()
    if not settings.auto_sync:
        typer.echo("Error: auto_sync is disabled (enable with: tagmatter config auto_sync true)", err=True)
        raise typer.Exit(1)
    if not directory.is_dir():
        typer.echo(f"Error: Not a directory: {directory}", err=True)
        raise typer.Exit(1)

    handler = configure_ops_log(get_config_dir())
    stop = threading.Event()

    def handle_signal(signum, frame):
        stop.set()

    signal.signal(signal.SIGTERM, handle_signal)

    def report(outcome: SyncOutcome):
        if outcome.status == UPDATED:
            typer.echo(_format_outcome(outcome))
        elif outcome.status == FAILED:
            typer.echo(f"failed {outcome.id}: {outcome.error}", err=True)

    coordinator = SyncCoordinator(FileDocumentSource(), settings, delay=delay, on_synced=report)
    watcher = PollingWatcher(directory, lambda path: coordinator.schedule(str(path)), interval=interval)

    typer.echo(f"Watching {directory} (Ctrl-C to stop)", err=True)
    try:
        watcher.run(stop)
    except KeyboardInterrupt:
        typer.echo("\nStopped.", err=True)
    finally:
        coordinator.close()
        remove_handler(handler)


@app.command()
def config(
    key: Annotated[Optional[str], typer.Argument(
        help=f"Setting name ({', '.join(SETTING_NAMES)})"
    )] = None,
    value: Annotated[Optional[str], typer.Argument(
        help="New value; omit to show the current one"
    )] = None,
):
    """
    Show or change settings.

    \b
    Examples:
        tagmatter config                       # Show all settings
        tagmatter config lowercase_tags        # Show one setting
        tagmatter config lowercase_tags false  # Change and save
    """
    settings = _get_settings()

    if key is None:
        if _get_json_output():
            typer.echo(json.dumps({
                "file": str(config_path(get_config_dir())),
                "settings": settings.to_dict(),
            }, indent=2))
            return
        typer.echo(f"file: {config_path(get_config_dir())}")
        for name, current in settings.to_dict().items():
            line = f"{name} = {_format_value(current)}"
            if name == "remove_inline_tags":
                line += "  # reserved, has no effect"
            typer.echo(line)
        return

    if key not in SETTING_NAMES:
        typer.echo(f"Error: Unknown setting {key!r} (known: {', '.join(SETTING_NAMES)})", err=True)
        raise typer.Exit(1)

    if value is not None:
        try:
            set_setting(settings, key, value)
        except ValueError as e:
            typer.echo(f"Error: {e}", err=True)
            raise typer.Exit(1)
        save_settings(settings, get_config_dir())

    current = getattr(settings, key)
    if _get_json_output():
        typer.echo(json.dumps({key: current}))
    else:
        typer.echo(_format_value(current) if value is None else f"{key} = {_format_value(current)}")


# -----------------------------------------------------------------------------

def main():
    try:
        app()
    except SystemExit:
        raise  # Let typer handle exit codes
    except KeyboardInterrupt:
        raise SystemExit(130)  # Standard exit code for Ctrl+C
    except Exception as e:
        # Log full traceback to file, show clean message to user
        from .errors import log_exception
        log_path = log_exception(e, sys.argv[1:])
        typer.echo(f"Error: {e}", err=True)
        typer.echo(f"Details logged to {log_path}", err=True)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
