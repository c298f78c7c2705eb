from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import NamedTuple, Optional

from .adapters.base import ProductBlockSource, ProductRecord
from .utils import classify_availability, collapse_ws, normalize_price, status_label

logger = logging.getLogger(__name__)


class Extraction(NamedTuple):
    products: tuple[ProductRecord, ...]
    blocks: int
    skipped: int


def record_from_block(block: ProductBlockSource) -> Optional[ProductRecord]:
    """Build a record from one block, or None when the block has no title."""
    name = collapse_ws(block.title_text())
    if not name:
        return None
    price = normalize_price(" ".join(block.price_texts()))
    available = classify_availability(block.control_labels())
    return ProductRecord(name=name, price=price, available=available)


def extract_products(blocks: Iterable[ProductBlockSource]) -> Extraction:
    """
    Walk the blocks once, in document order. Blocks without a title (ad slots,
    spacers) are dropped and counted in `skipped`.
    """
    products: list[ProductRecord] = []
    seen = 0
    skipped = 0
    for i, block in enumerate(blocks, start=1):
        seen += 1
        rec = record_from_block(block)
        if rec is None:
            logger.info("Skipping product #%d: empty name", i)
            skipped += 1
            continue
        logger.debug(
            "Found product #%d: name=%r price=%r status=%s",
            i,
            rec.name,
            rec.price,
            status_label(rec.available),
        )
        products.append(rec)

    logger.info("Successfully parsed %d products", len(products))
    return Extraction(products=tuple(products), blocks=seen, skipped=skipped)
