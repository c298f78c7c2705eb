from __future__ import annotations

import re
from collections.abc import Iterable
from functools import lru_cache

import requests
from requests.adapters import HTTPAdapter, Retry

# ---------- Text helpers ----------

_WS_RE = re.compile(r"\s+")


def collapse_ws(s: str) -> str:
    return _WS_RE.sub(" ", s or "").strip()


# ---------- Price normalizer ----------

CURRENCY = "руб."
_QTY = r"(\d+(?:[.,]\d+)?)"


@lru_cache(maxsize=8)
def _price_patterns(currency: str) -> tuple[re.Pattern[str], re.Pattern[str]]:
    cur = re.escape(currency)
    # "<qty> руб." at the very end, optionally followed by an "за ..." clause
    anchored = re.compile(_QTY + r"\s*" + cur + r"(?:\s*за\s+.*)?$")
    loose = re.compile(_QTY + r"\s*" + cur)
    return anchored, loose


def normalize_price(raw: str, currency: str = CURRENCY) -> str:
    """
    Reduce scraped price text to "<qty> <currency>".

    Cards on sale render the crossed-out price before the current one, so the
    last price-like chunk wins. Text without any recognizable price comes back
    whitespace-collapsed but otherwise untouched.
    """
    cleaned = collapse_ws(raw)
    anchored, loose = _price_patterns(currency)

    m = anchored.search(cleaned)
    if m:
        return f"{m.group(1)} {currency}"

    found = loose.findall(cleaned)
    if found:
        return f"{found[-1]} {currency}"

    return cleaned


# ---------- Availability classifier ----------

BUY_KEYWORD = "купить"
NOTIFY_KEYWORD = "уведомить"


def classify_availability(
    labels: Iterable[str],
    buy_keyword: str = BUY_KEYWORD,
    notify_keyword: str = NOTIFY_KEYWORD,
) -> bool:
    """
    True when a buy button is present and no "notify me" button is.
    A notify button means out of stock even if a buy button is rendered too.
    """
    has_buy = False
    has_notify = False
    for label in labels:
        text = (label or "").strip().lower()
        if buy_keyword in text:
            has_buy = True
        if notify_keyword in text:
            has_notify = True

    available = has_buy
    if has_notify:
        available = False
    return available


def status_label(available: bool) -> str:
    return "AVAILABLE" if available else "OUT OF STOCK"


# ---------- HTTP session ----------


def make_session(retries: int = 0) -> requests.Session:
    """
    Session used for both the listing page and the Telegram API.
    No retries unless the caller asks for them.
    """
    s = requests.Session()
    s.headers.update({"User-Agent": "Mozilla/5.0 (compatible; SteakWatcher/1.0)"})
    if retries > 0:
        policy = Retry(
            total=retries,
            backoff_factor=0.5,
            status_forcelist=(429, 500, 502, 503, 504),
            allowed_methods=frozenset(["GET", "HEAD"]),
            raise_on_status=False,
        )
        s.mount("https://", HTTPAdapter(max_retries=policy))
        s.mount("http://", HTTPAdapter(max_retries=policy))
    return s
