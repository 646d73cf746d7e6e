from __future__ import annotations

import logging
from datetime import datetime
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Optional

import typer

from .config import get_settings, load_dotenv
from .csv_export import export_csv
from .engine import decide, decide_all
from .errors import VaxStatusError
from .examples import example_snapshot
from .repository import Repository
from .session_summary import session_overview
from .snapshot_loader import dump_snapshot, load_snapshot


app = typer.Typer(add_completion=False, no_args_is_help=True)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Log which rules fired")):
    load_dotenv()
    get_settings.cache_clear()
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _load(snapshot: str) -> Repository:
    try:
        return load_snapshot(snapshot)
    except VaxStatusError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command("init")
def cli_init(out: str = typer.Option("snapshot.example.json", "--out")):
    dump_snapshot(example_snapshot(), out)
    typer.echo(out)


@app.command("decide")
def cli_decide(
    snapshot: str = typer.Option(..., "--snapshot", help="Snapshot JSON file or directory"),
    patient_session: str = typer.Option(..., "--patient-session", help="Patient session id"),
    out: Optional[str] = typer.Option(None, "--out", help="Optional path for status JSON output"),
):
    repo = _load(snapshot)
    try:
        status = decide(repo, patient_session)
    except VaxStatusError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    if status is None:
        typer.echo(f"Error: patient session not found: {patient_session}", err=True)
        raise typer.Exit(code=1)
    payload = status.model_dump_json(indent=2)
    if out:
        Path(out).write_text(payload, encoding="utf-8")
        typer.echo(out)
    else:
        typer.echo(payload)


@app.command("session-status")
def cli_session_status(
    snapshot: str = typer.Option(..., "--snapshot", help="Snapshot JSON file or directory"),
    session: str = typer.Option(..., "--session", help="Session id"),
    today: Optional[datetime] = typer.Option(None, "--today", formats=["%Y-%m-%d"], help="Defaults to today"),
):
    repo = _load(snapshot)
    overview = session_overview(repo, session, today)
    if overview is None:
        typer.echo(f"Error: session not found: {session}", err=True)
        raise typer.Exit(code=1)
    typer.echo(overview.model_dump_json(indent=2, exclude={"patient_sessions"}))


@app.command("export-csv")
def cli_export_csv(
    snapshot: str = typer.Option(..., "--snapshot", help="Snapshot JSON file or directory"),
    out: str = typer.Option("statuses.csv", "--out"),
):
    repo = _load(snapshot)
    export_csv(decide_all(repo), out)
    typer.echo(out)


@app.command("version")
def cli_version():
    try:
        typer.echo(version("vaxstatus"))
    except PackageNotFoundError:
        typer.echo("unknown")


if __name__ == "__main__":
    app()
