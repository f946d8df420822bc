"""Command-line interface for dataorganizer."""

from __future__ import annotations

import json
from pathlib import Path

import click

from dataorganizer import __version__


@click.group()
@click.version_option(version=__version__, prog_name="dataorganizer")
def main() -> None:
    """dataorganizer -- spreadsheet-like tables with CSV/PDF import and export."""


# ---------------------------------------------------------------------------
# helpers
# ---------------------------------------------------------------------------


def _import_or_fail(csv_file: Path):
    from dataorganizer.ui.service import TableSession

    session = TableSession()
    result = session.import_file(csv_file.read_bytes(), csv_file.name)
    if not result.ok:
        raise click.ClickException(result.error or "Import failed")
    return session, result


def _bind_logs(directory: str | None) -> None:
    if directory:
        from dataorganizer.logging import set_log_dir

        set_log_dir(Path(directory) / "logs")


# ---------------------------------------------------------------------------
# Inspect / convert
# ---------------------------------------------------------------------------


@main.command()
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Output the decoded table as JSON.")
@click.option("--log-dir", default=None, type=click.Path(file_okay=False), help="Write events under DIR/logs.")
def inspect(csv_file: str, as_json: bool, log_dir: str | None) -> None:
    """Decode CSV_FILE and summarize the resulting table."""
    _bind_logs(log_dir)
    session, result = _import_or_fail(Path(csv_file))
    table = session.table

    if as_json:
        out = {
            "table": table.model_dump(mode="json"),
            "theme_hint": result.theme_hint,
        }
        click.echo(json.dumps(out, indent=2))
        return

    click.echo(f"Table: {table.name}")
    click.echo(f"Rows: {len(table.rows)}")
    click.echo("Columns:")
    for col in table.columns:
        click.echo(f"  {col.id:20s} {col.type:9s} {col.title}")
    if result.theme_hint:
        click.echo(f"Theme hint: {result.theme_hint}")


@main.command()
@click.argument("csv_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--to", "fmt", type=click.Choice(["csv", "pdf"]), default="pdf", show_default=True, help="Output format.")
@click.option("-o", "--output", default=None, type=click.Path(dir_okay=False), help="Output file (default: <table-slug>.<fmt>).")
@click.option("--no-index", is_flag=True, help="Omit the # index column.")
@click.option("--log-dir", default=None, type=click.Path(file_okay=False), help="Write events under DIR/logs.")
def convert(csv_file: str, fmt: str, output: str | None, no_index: bool, log_dir: str | None) -> None:
    """Import CSV_FILE and export it again as CSV or PDF."""
    _bind_logs(log_dir)
    session, _ = _import_or_fail(Path(csv_file))

    if fmt == "pdf":
        result = session.export_pdf(include_index_column=not no_index)
    else:
        result = session.export_csv(include_index_column=not no_index)
    if not result.ok:
        raise click.ClickException(result.error or "Export failed")

    target = Path(output) if output else Path(result.filename)
    target.write_bytes(result.content)
    click.echo(f"Exported {session.table.name} -> {target}")


# ---------------------------------------------------------------------------
# Presets / themes / version
# ---------------------------------------------------------------------------


@main.command()
def presets() -> None:
    """List the built-in table presets."""
    from dataorganizer.model import PRESETS

    for preset in PRESETS:
        titles = ", ".join(c.title for c in preset.columns)
        click.echo(f"  {preset.id:20s} {preset.name} ({titles})")


@main.group()
def theme() -> None:
    """Theme preference commands."""


@theme.command("show")
@click.argument("directory", type=click.Path(exists=True, file_okay=False), default=".")
def theme_show(directory: str) -> None:
    """Show the saved theme and the available ones."""
    from dataorganizer.themes import THEMES
    from dataorganizer.ui.service import TableSession

    current = TableSession.from_directory(Path(directory)).theme
    for t in THEMES:
        marker = "*" if t.id == current.id else " "
        click.echo(f"{marker} {t.id:10s} {t.name}")


@theme.command("set")
@click.argument("theme_id")
@click.argument("directory", type=click.Path(exists=True, file_okay=False), default=".")
def theme_set(theme_id: str, directory: str) -> None:
    """Save THEME_ID as the preferred theme."""
    from dataorganizer.themes import find_theme
    from dataorganizer.ui.service import TableSession

    if find_theme(theme_id) is None:
        raise click.ClickException(f"Unknown theme: {theme_id!r}")
    _bind_logs(directory)
    chosen = TableSession.from_directory(Path(directory)).set_theme(theme_id)
    click.echo(f"Theme: {chosen.name}")


@main.command("version")
@click.argument("directory", type=click.Path(exists=True, file_okay=False), default=".")
def version_cmd(directory: str) -> None:
    """Show the display version derived from the repository's commits."""
    from dataorganizer.config import load_config
    from dataorganizer.version_info import get_version_info

    cfg = load_config(Path(directory))
    info = get_version_info(cfg["version_repo"], timeout=float(cfg["version_timeout_secs"]))
    click.echo(f"{info.version} (last updated {info.last_updated})")
    if info.error:
        click.echo(f"Warning: {info.error}", err=True)


# ---------------------------------------------------------------------------
# UI
# ---------------------------------------------------------------------------


@main.command()
@click.argument("directory", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--host", default="127.0.0.1", help="Host to bind to.")
@click.option("--port", type=int, default=None, help="Port (auto-select if omitted).")
def ui(directory: str, host: str, port: int | None) -> None:
    """Serve the editor API for DIRECTORY."""
    import socket

    import uvicorn

    from dataorganizer.ui.server import create_app

    app = create_app(Path(directory))

    if port is None:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind((host, 0))
            port = s.getsockname()[1]

    click.echo(f"Serving API at http://{host}:{port}/api")
    click.echo("Press Ctrl+C to stop")

    try:
        uvicorn.run(app, host=host, port=port, log_level="warning")
    except KeyboardInterrupt:
        click.echo("\nStopped.")


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@main.command("events")
@click.argument("directory", type=click.Path(exists=True, file_okay=False), default=".")
@click.option("--level", default=None, type=click.Choice(["info", "warning", "error"]), help="Filter by level.")
@click.option("--type", "event_type", default=None, help="Filter by event type.")
@click.option("--limit", default=100, type=int, help="Maximum events to show.")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON.")
def events(directory: str, level: str | None, event_type: str | None, limit: int, as_json: bool) -> None:
    """Show recent events logged under DIRECTORY/logs."""
    from dataorganizer.logging import EventSink

    sink = EventSink(Path(directory) / "logs")
    rows = sink.read_events(level=level, event_type=event_type, limit=limit)

    if as_json:
        click.echo(json.dumps(rows, indent=2))
        return
    if not rows:
        click.echo("No events found.")
        return
    for e in rows:
        code = f" [{e['error_code']}]" if e.get("error_code") else ""
        click.echo(f"{e.get('ts', '')}  {e.get('level', ''):7s}  {e.get('event_type', '')}{code}  {e.get('message', '')}")
