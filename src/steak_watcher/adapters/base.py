from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import NamedTuple

import requests


class ProductRecord(NamedTuple):
    name: str
    price: str
    available: bool


class ProductBlockSource(ABC):
    """
    One product region of a listing page, seen through the three signals the
    extractor needs. Implementations return empty strings/lists for anything
    missing from the markup; they never raise for malformed blocks.
    """

    @abstractmethod
    def title_text(self) -> str:
        raise NotImplementedError

    @abstractmethod
    def price_texts(self) -> list[str]:
        raise NotImplementedError

    @abstractmethod
    def control_labels(self) -> list[str]:
        raise NotImplementedError


class Adapter(ABC):
    @abstractmethod
    def fetch(
        self,
        session: requests.Session,
        url: str,
        timeout: float = 25,
    ) -> Iterable[ProductBlockSource]:
        """
        Fetch the listing page and return its product blocks in document order.
        Implementations should:
          - raise FetchError on transport failure or a non-2xx status
          - not paginate
        """
        raise NotImplementedError
