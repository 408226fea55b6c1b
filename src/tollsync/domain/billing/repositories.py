"""Repository protocols for the Billing bounded context."""

from __future__ import annotations

from typing import Protocol

from tollsync.domain.billing.value_objects import Bill, Card

# =============================================================================
# PROTOCOLS
# =============================================================================


class BillingSource(Protocol):
    """An authenticated session against the toll billing service."""

    def list_cards(self) -> list[Card]:
        """Return every card tracked by the account."""
        ...

    def get_bills_page(self, card: Card, page_size: int, page: int) -> list[Bill]:
        """Return one page of bills; an empty page means no more data."""
        ...
