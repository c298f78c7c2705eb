from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from .adapters.product_grid import ProductGridAdapter
from .config import DEFAULT_CONFIG_PATH
from .core import filter_tracked, run_watcher
from .errors import WatcherError
from .extract import extract_products
from .notify import render_products_message
from .scheduler import parse_schedule
from .utils import make_session, status_label

app = typer.Typer(help="Watch a shop listing and send a Telegram message when tracked items show up.")

LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str) -> None:
    lvl = getattr(logging, level.upper(), None)
    if not isinstance(lvl, int):
        raise typer.BadParameter(f"unknown log level: {level}")
    logging.basicConfig(level=lvl, format=LOG_FORMAT)


@app.callback()
def main(
    log_level: str = typer.Option(
        "INFO", "--log-level", envvar="LOG_LEVEL", help="DEBUG, INFO, WARNING, ERROR"
    ),
):
    setup_logging(log_level)


@app.command("watch")
def watch(
    config: str = typer.Option(DEFAULT_CONFIG_PATH, "--config", "-c", help="Path to config.yaml"),
    env: str | None = typer.Option(None, "--env", help="Path to a .env file to load"),
    once: bool = typer.Option(False, help="Run a single check then exit"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Log the message instead of sending it"),
):
    try:
        run_watcher(config_path=config, dotenv_path=env, once=once, dry_run=dry_run)
    except WatcherError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)


@app.command("parse")
def parse_cmd(
    source: str = typer.Argument(..., help="Listing URL or path to a saved HTML page"),
    track: Optional[List[str]] = typer.Option(None, "--track", "-t", help="Only show names containing this"),
    timeout: float = typer.Option(25, help="HTTP timeout in seconds"),
):
    """
    Print every product found on a listing page. Nothing is sent.
    """
    adapter = ProductGridAdapter()
    p = Path(source)
    try:
        if p.exists():
            blocks = adapter.parse(p.read_text(encoding="utf-8"))
        else:
            blocks = adapter.fetch(make_session(), source, timeout=timeout)
    except WatcherError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    extraction = extract_products(blocks)
    products = list(extraction.products)
    if track:
        products = filter_tracked(products, track)

    typer.echo(f"Products: {len(products)} (blocks={extraction.blocks} skipped={extraction.skipped})")
    for rec in products:
        typer.echo(f"- {rec.name} - {rec.price} [{status_label(rec.available)}]")
    if track and products:
        typer.echo("")
        typer.echo(render_products_message(products).rstrip("\n"))


@app.command("schedule")
def schedule_cmd(
    expr: str = typer.Argument(..., help='e.g. "@every 30m", "@hourly" or "*/15 * * * *"'),
):
    """
    Validate a schedule expression.
    """
    try:
        trigger = parse_schedule(expr)
    except WatcherError as e:
        raise typer.BadParameter(str(e))
    typer.echo(str(trigger))


if __name__ == "__main__":
    app()
