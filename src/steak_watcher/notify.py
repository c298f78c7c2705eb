from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

import requests

from .adapters.base import ProductRecord
from .errors import ConfigError, NotificationError

if TYPE_CHECKING:
    from .config import Settings

logger = logging.getLogger(__name__)

HEADER = "🥩 Найденные стейки:"
IN_STOCK = "✅ ДОСТУПЕН"
OUT_OF_STOCK = "❌ НЕТ В НАЛИЧИИ"

TELEGRAM_API = "https://api.telegram.org"

# ---------- Notifier base ----------


class Notifier:
    """Abstract notifier. Implement send()."""

    def send(self, text: str) -> None:
        raise NotImplementedError


# ---------- Telegram ----------


class TelegramNotifier(Notifier):
    """
    Sends plain-text messages through the Telegram Bot API, splitting on line
    boundaries when a message exceeds Telegram's length limit.
    """

    limit = 4000  # Telegram caps sendMessage text at 4096 chars

    def __init__(
        self,
        token: str,
        chat_id: str,
        session: requests.Session | None = None,
        timeout: float = 15,
    ):
        self.token = token
        self.chat_id = chat_id
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{TELEGRAM_API}/bot{self.token}/sendMessage"

    def _post(self, text: str) -> None:
        payload: dict[str, Any] = {"chat_id": self.chat_id, "text": text}
        try:
            r = self.session.post(self.url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise NotificationError(f"failed to send message: {e}") from e
        if not 200 <= r.status_code < 300:
            raise NotificationError(
                f"telegram API error: {r.status_code} {r.text[:200]}", status_code=r.status_code
            )

    def chunks(self, text: str) -> list[str]:
        if len(text) <= self.limit:
            return [text]

        out: list[str] = []
        buf: list[str] = []
        cur = 0
        for line in text.splitlines():
            add_len = len(line) + 1  # + newline
            if cur + add_len > self.limit and buf:
                out.append("\n".join(buf))
                buf = []
                cur = 0
            buf.append(line)
            cur += add_len
        if buf:
            out.append("\n".join(buf))
        return out

    def send(self, text: str) -> None:
        """
        Deliver `text`, in several messages when it is too long. Chunks go out
        in order and there is no rollback: if chunk N fails, chunks 1..N-1 have
        already been delivered and the NotificationError names chunk N.
        """
        parts = self.chunks(text)
        for i, part in enumerate(parts, start=1):
            try:
                self._post(part)
            except NotificationError as e:
                if len(parts) == 1:
                    raise
                raise NotificationError(
                    f"chunk {i}/{len(parts)} failed ({i - 1} already delivered): {e}",
                    status_code=e.status_code,
                ) from e


# ---------- Rendering ----------


def render_products_message(products: Sequence[ProductRecord]) -> str:
    """
    Header, blank line, then one bullet per product:

        • Ribeye 500g - 1200 руб. [✅ ДОСТУПЕН]
    """
    message = HEADER + "\n\n"
    for p in products:
        status = IN_STOCK if p.available else OUT_OF_STOCK
        message += f"• {p.name} - {p.price} [{status}]\n"
    return message


# ---------- Factory ----------


def build_notifier(settings: Settings, session: requests.Session | None = None) -> Notifier:
    if not (settings.telegram_token and settings.telegram_chat_id):
        raise ConfigError("Set telegram.token and telegram.chat_id (or TELEGRAM_TOKEN/TELEGRAM_CHAT_ID)")
    return TelegramNotifier(
        settings.telegram_token,
        settings.telegram_chat_id,
        session=session,
        timeout=settings.timeout,
    )
