from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import List, Optional

import requests
from bs4 import BeautifulSoup
from bs4.element import Tag

from ..errors import FetchError
from .base import Adapter, ProductBlockSource

logger = logging.getLogger(__name__)

ITEM_SELECTOR = ".product-item"
TITLE_SELECTOR = ".product-title"
# current price first, then the sale/new price some cards use instead
PRICE_SELECTOR = ".product-new, .product-price"
CONTROL_SELECTOR = "button, .btn"


def as_tag(obj: object | None) -> Optional[Tag]:
    """Return obj if it is a bs4 Tag, else None (filters out NavigableString/ints/etc)."""
    return obj if isinstance(obj, Tag) else None


def _texts(card: Tag, selector: str) -> List[str]:
    out: List[str] = []
    for node in card.select(selector):
        tag = as_tag(node)
        if tag is not None:
            # no separator, so "Rib<b>eye</b>" stays one word
            out.append(tag.get_text())
    return out


class SoupProductBlock(ProductBlockSource):
    """A `.product-item` card parsed by BeautifulSoup."""

    def __init__(
        self,
        card: Tag,
        title_selector: str = TITLE_SELECTOR,
        price_selector: str = PRICE_SELECTOR,
        control_selector: str = CONTROL_SELECTOR,
    ):
        self.card = card
        self.title_selector = title_selector
        self.price_selector = price_selector
        self.control_selector = control_selector

    def title_text(self) -> str:
        return " ".join(_texts(self.card, self.title_selector))

    def price_texts(self) -> list[str]:
        return _texts(self.card, self.price_selector)

    def control_labels(self) -> list[str]:
        # select() yields each element once even when it matches both `button` and `.btn`
        return _texts(self.card, self.control_selector)


class ProductGridAdapter(Adapter):
    """
    Adapter for server-rendered product grids where every card is a
    `.product-item` holding a title, a price and buy/notify buttons.
    """

    def __init__(
        self,
        item_selector: str = ITEM_SELECTOR,
        title_selector: str = TITLE_SELECTOR,
        price_selector: str = PRICE_SELECTOR,
        control_selector: str = CONTROL_SELECTOR,
    ):
        self.item_selector = item_selector
        self.title_selector = title_selector
        self.price_selector = price_selector
        self.control_selector = control_selector

    def fetch_document(
        self, session: requests.Session, url: str, timeout: float = 25
    ) -> BeautifulSoup:
        logger.info("Fetching products from %s", url)
        try:
            r = session.get(url, timeout=timeout)
        except requests.RequestException as e:
            raise FetchError(url, f"failed to fetch {url}: {e}") from e

        logger.info("HTTP response status: %s", r.status_code)
        if not 200 <= r.status_code < 300:
            raise FetchError(
                url, f"status code error: {r.status_code} for {url}", status_code=r.status_code
            )
        return BeautifulSoup(r.text, "html.parser")

    def blocks(self, soup: BeautifulSoup | Tag) -> List[SoupProductBlock]:
        out: List[SoupProductBlock] = []
        for node in soup.select(self.item_selector):
            card = as_tag(node)
            if card is None:
                continue
            out.append(
                SoupProductBlock(
                    card,
                    title_selector=self.title_selector,
                    price_selector=self.price_selector,
                    control_selector=self.control_selector,
                )
            )
        return out

    def parse(self, html: str) -> List[SoupProductBlock]:
        return self.blocks(BeautifulSoup(html, "html.parser"))

    def fetch(
        self, session: requests.Session, url: str, timeout: float = 25
    ) -> Iterable[ProductBlockSource]:
        soup = self.fetch_document(session, url, timeout=timeout)
        return self.blocks(soup)
