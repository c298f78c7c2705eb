from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import NamedTuple, Optional

import requests

from .adapters.base import Adapter, ProductRecord
from .adapters.product_grid import ProductGridAdapter
from .config import DEFAULT_CONFIG_PATH, Settings, load_settings
from .extract import extract_products
from .notify import Notifier, build_notifier, render_products_message
from .scheduler import run_scheduled
from .utils import make_session, status_label

logger = logging.getLogger(__name__)


class RunResult(NamedTuple):
    products: tuple[ProductRecord, ...]
    matched: tuple[ProductRecord, ...]
    skipped: int
    notified: bool
    message: Optional[str] = None


def filter_tracked(
    products: Iterable[ProductRecord], tracked: Sequence[str]
) -> list[ProductRecord]:
    """Keep products whose name contains any tracked term, case-insensitively."""
    terms = [t.lower() for t in tracked]
    out: list[ProductRecord] = []
    for p in products:
        name = p.name.lower()
        if any(t in name for t in terms):
            out.append(p)
    return out


def log_listing(products: Sequence[ProductRecord]) -> None:
    logger.info("=== ALL PRODUCTS ===")
    available_count = 0
    for i, p in enumerate(products, start=1):
        if p.available:
            available_count += 1
        logger.info("[%d] %s - %s [%s]", i, p.name, p.price, status_label(p.available))
    logger.info(
        "=== END OF PRODUCT LIST === (Available: %d/%d)", available_count, len(products)
    )


def run_once(
    settings: Settings,
    *,
    session: requests.Session,
    adapter: Adapter,
    notifier: Notifier | None,
    dry_run: bool = False,
) -> RunResult:
    """
    One full pass: fetch -> extract -> filter -> notify.
    FetchError and NotificationError propagate to the caller.
    """
    blocks = adapter.fetch(session, settings.url, timeout=settings.timeout)
    extraction = extract_products(blocks)
    log_listing(extraction.products)

    matched = filter_tracked(extraction.products, settings.tracked)
    if not matched:
        logger.info("No tracked items found")
        return RunResult(extraction.products, (), extraction.skipped, notified=False)

    message = render_products_message(matched)
    if dry_run or notifier is None:
        logger.info("Dry run; message not sent:\n%s", message)
        return RunResult(
            extraction.products, tuple(matched), extraction.skipped, False, message
        )

    notifier.send(message)
    logger.info("Notification sent (%d tracked items)", len(matched))
    return RunResult(extraction.products, tuple(matched), extraction.skipped, True, message)


def run_watcher(
    config_path: str | None = DEFAULT_CONFIG_PATH,
    dotenv_path: str | None = None,
    once: bool = False,
    dry_run: bool = False,
) -> None:
    settings = load_settings(config_path, dotenv_path=dotenv_path)
    adapter = ProductGridAdapter()

    session = make_session()
    notifier = None if dry_run else build_notifier(settings, session=session)

    logger.info("Watching: %s", settings.url)
    logger.info("Tracked: %s", ", ".join(settings.tracked) or "(none)")
    logger.info("Schedule: %s", settings.schedule)

    def tick() -> RunResult:
        return run_once(
            settings, session=session, adapter=adapter, notifier=notifier, dry_run=dry_run
        )

    if once:
        tick()
        return

    run_scheduled(tick, settings.schedule)
