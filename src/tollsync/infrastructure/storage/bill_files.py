"""Content generator that publishes bill history as JSONP files."""

from __future__ import annotations

import logging

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from tollsync.domain.billing.repositories import BillingSource
from tollsync.domain.billing.services import collect_bills
from tollsync.domain.billing.value_objects import BillCollection
from tollsync.infrastructure.storage.jsonp_writer import (
    render_jsonp,
    serialize_bill,
    serialize_card,
    write_files,
)
from tollsync.shared.constants import (
    BILLS_FILE_SUFFIX,
    BILLS_JSONP_PREFIX,
    CARDS_FILENAME,
    CARDS_JSONP_PREFIX,
    DEFAULT_PAGE_SIZE,
)
from tollsync.shared.types import FailurePolicy, FilePath

logger = logging.getLogger(__name__)


@dataclass
class BillFileGenerator:
    """Downloads every card's bills and writes them as JSONP files.

    Implements ``ContentGenerator``. Logging in is deferred to ``produce``
    so nothing is fetched until the working copy has been synced.
    """

    source_factory: Callable[[], BillingSource]
    page_size: int = DEFAULT_PAGE_SIZE
    failure_policy: FailurePolicy = FailurePolicy.ABORT

    def produce(self, root: Path) -> list[FilePath]:
        source = self.source_factory()
        cards = source.list_cards()
        collection = collect_bills(source, cards, self.page_size, self.failure_policy)
        if collection.skipped:
            logger.warning(
                "Publishing without %d failed cards: %s",
                len(collection.skipped),
                ", ".join(collection.skipped),
            )
        return write_files(root, render_files(collection))


def render_files(collection: BillCollection) -> dict[FilePath, bytes]:
    """Render the card index and one bill file per retrieved card.

    Skipped cards stay in the index; their bill file is left untouched.
    """
    files = {
        FilePath(CARDS_FILENAME): render_jsonp(
            CARDS_JSONP_PREFIX, [serialize_card(c) for c in collection.cards]
        )
    }
    for card in collection.cards:
        if card.card_no in collection.skipped:
            continue
        files[FilePath(card.card_no + BILLS_FILE_SUFFIX)] = render_jsonp(
            BILLS_JSONP_PREFIX,
            [serialize_bill(b) for b in collection.bills_for(card)],
        )
    return files
