from __future__ import annotations

import logging
import re
import signal
from collections.abc import Callable
from datetime import timedelta
from typing import Any

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.base import BaseTrigger
from apscheduler.triggers.cron import CronTrigger
from apscheduler.triggers.interval import IntervalTrigger

from .errors import ConfigError

logger = logging.getLogger(__name__)

DESCRIPTORS = {
    "@yearly": "0 0 1 1 *",
    "@annually": "0 0 1 1 *",
    "@monthly": "0 0 1 * *",
    "@weekly": "0 0 * * 0",
    "@daily": "0 0 * * *",
    "@midnight": "0 0 * * *",
    "@hourly": "0 * * * *",
}

_DURATION_RE = re.compile(r"(\d+(?:\.\d+)?)(ms|h|m|s)")
_UNIT_SECONDS = {"h": 3600.0, "m": 60.0, "s": 1.0, "ms": 0.001}


def parse_duration(raw: str) -> timedelta:
    """Parse Go-style durations such as "1h30m", "45s" or "1.5h"."""
    s = raw.strip()
    if not s:
        raise ConfigError("empty duration")
    pos = 0
    total = 0.0
    for m in _DURATION_RE.finditer(s):
        if m.start() != pos:
            break
        total += float(m.group(1)) * _UNIT_SECONDS[m.group(2)]
        pos = m.end()
    if pos != len(s):
        raise ConfigError(f"invalid duration: {raw!r}")
    if total <= 0:
        raise ConfigError(f"duration must be positive: {raw!r}")
    return timedelta(seconds=total)


# crontab numbering: 0 (and 7) is Sunday
WEEKDAY_NAMES = ("sun", "mon", "tue", "wed", "thu", "fri", "sat")


def _weekday_number(token: str, field: str) -> int:
    t = token.strip().lower()
    if t in WEEKDAY_NAMES:
        return WEEKDAY_NAMES.index(t)
    if t.isdigit() and int(t) <= 7:
        return int(t)
    raise ConfigError(f"invalid day-of-week {token!r} in {field!r}")


def cron_weekdays(field: str) -> str:
    """
    Translate a crontab day-of-week field into APScheduler weekday names.

    APScheduler counts 0 as Monday while crontab counts 0 (or 7) as Sunday,
    so numbers never reach the trigger: "1-5" becomes "mon,tue,wed,thu,fri".
    """
    if field.strip() == "*":
        return "*"
    days: set[int] = set()
    for part in field.split(","):
        base, slash, step_s = part.partition("/")
        step = 1
        if slash:
            if not step_s.isdigit() or int(step_s) == 0:
                raise ConfigError(f"invalid step in day-of-week {field!r}")
            step = int(step_s)
        if base == "*":
            lo, hi = 0, 6
        elif "-" in base:
            a, b = base.split("-", 1)
            lo, hi = _weekday_number(a, field), _weekday_number(b, field)
        else:
            lo = _weekday_number(base, field)
            hi = 6 if slash else lo
        if lo > hi:
            raise ConfigError(f"invalid day-of-week range {part!r}")
        days.update(d % 7 for d in range(lo, hi + 1, step))
    return ",".join(WEEKDAY_NAMES[d] for d in sorted(days))


def parse_schedule(expr: str, timezone: Any | None = None) -> BaseTrigger:
    """
    Turn a schedule expression into an APScheduler trigger.

    Accepted forms:
      - "@every <duration>"  -> IntervalTrigger
      - "@hourly", "@daily", ... -> CronTrigger
      - "*/30 * * * *" (5-field crontab, 0 = Sunday) -> CronTrigger
    """
    s = (expr or "").strip()
    if not s:
        raise ConfigError("empty schedule expression")

    if s.startswith("@every"):
        delta = parse_duration(s[len("@every"):])
        return IntervalTrigger(seconds=delta.total_seconds(), timezone=timezone)

    crontab = DESCRIPTORS.get(s.lower(), s)
    if crontab.startswith("@"):
        raise ConfigError(f"unknown schedule descriptor: {s!r}")
    fields = crontab.split()
    if len(fields) != 5:
        raise ConfigError(f"invalid schedule expression {s!r}: expected 5 fields, got {len(fields)}")
    minute, hour, day, month, dow = fields
    try:
        return CronTrigger(
            minute=minute,
            hour=hour,
            day=day,
            month=month,
            day_of_week=cron_weekdays(dow),
            timezone=timezone,
        )
    except ValueError as e:
        raise ConfigError(f"invalid schedule expression {s!r}: {e}") from e


def guarded(job: Callable[[], Any]) -> Callable[[], None]:
    """Wrap a job so a failing run is logged instead of killing the schedule."""

    def _run() -> None:
        try:
            job()
        except Exception:
            logger.exception("Error during scheduled run")

    return _run


def _raise_exit(signum: int, frame: Any) -> None:
    raise SystemExit(0)


def run_scheduled(
    job: Callable[[], Any],
    expr: str,
    scheduler: Any | None = None,
) -> None:
    """
    Run `job` once right away, then on the schedule described by `expr`.
    Blocks until interrupted (Ctrl+C / SIGTERM).
    """
    trigger = parse_schedule(expr)
    run = guarded(job)

    logger.info("Running initial check...")
    run()

    sched = scheduler
    if sched is None:
        sched = BlockingScheduler()
        signal.signal(signal.SIGTERM, _raise_exit)
    sched.add_job(run, trigger, max_instances=1, coalesce=True, id="steak-watch")
    logger.info("Scheduler started (%s). Press Ctrl+C to stop.", expr)
    try:
        sched.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Shutting down...")
        sched.shutdown(wait=False)
