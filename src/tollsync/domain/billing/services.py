"""Domain services for retrieving complete billing datasets."""

from __future__ import annotations

import logging

from collections.abc import Callable
from typing import TypeVar

from tollsync.domain.billing.repositories import BillingSource
from tollsync.domain.billing.value_objects import Bill, BillCollection, Card
from tollsync.shared.constants import MAX_PAGE_SIZE, MIN_PAGE_SIZE
from tollsync.shared.exceptions import RetrievalError
from tollsync.shared.types import FailurePolicy

logger = logging.getLogger(__name__)

T = TypeVar("T")

PageFetcher = Callable[[int, int], list[T]]
"""Called as ``fetcher(page_size, page_number)``; page numbers start at 1."""

# =============================================================================
# PAGINATION
# =============================================================================


def fetch_all(fetcher: PageFetcher[T], page_size: int) -> list[T]:
    """Fetch every page until an empty one comes back.

    The data source has no resumption cursor, so a failed fetch is not
    retried here: the exception propagates and the records gathered so far
    are discarded. Callers restart from page 1.

    Args:
        fetcher: Page fetch callable.
        page_size: Records per page, between 1 and 200.

    Returns:
        All records, in page order.

    Raises:
        ValueError: If ``page_size`` is out of range.
    """
    if not MIN_PAGE_SIZE <= page_size <= MAX_PAGE_SIZE:
        msg = (
            f"page_size must be between {MIN_PAGE_SIZE} and {MAX_PAGE_SIZE}, "
            f"got {page_size}"
        )
        raise ValueError(msg)

    records: list[T] = []
    page = 1
    while True:
        batch = fetcher(page_size, page)
        if not batch:
            break
        records.extend(batch)
        page += 1
    logger.debug("Fetched %d records in %d pages", len(records), page)
    return records


# =============================================================================
# DATASETS
# =============================================================================


def collect_bills(
    source: BillingSource,
    cards: list[Card],
    page_size: int,
    failure_policy: FailurePolicy = FailurePolicy.ABORT,
) -> BillCollection:
    """Download the full bill history of every card.

    With ``FailurePolicy.ABORT`` the first failing card aborts the whole
    collection. With ``FailurePolicy.SKIP`` the failing card is left out
    and its number recorded in ``BillCollection.skipped``; the card itself
    stays in ``BillCollection.cards``.

    Raises:
        RetrievalError: On the first failure when the policy is ``ABORT``.
    """
    bills: dict[str, list[Bill]] = {}
    skipped: list[str] = []

    for card in cards:

        def fetch_page(size: int, page: int, card: Card = card) -> list[Bill]:
            return source.get_bills_page(card, size, page)

        try:
            card_bills = fetch_all(fetch_page, page_size)
        except RetrievalError as e:
            if failure_policy is FailurePolicy.ABORT:
                raise RetrievalError(f"bills of card {card.card_no}", e.reason) from e
            logger.warning("Skipping card %s: %s", card.card_no, e)
            skipped.append(card.card_no)
            continue

        logger.info("Card %s: %d bills", card.card_no, len(card_bills))
        bills[card.card_no] = card_bills

    return BillCollection(cards=list(cards), bills=bills, skipped=skipped)
