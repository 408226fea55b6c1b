"""Value objects for the Billing bounded context."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime

# Station labels come back as "<name>驶入" / "<name>驶出" (entered / exited).
_ENTRY_SUFFIX = "驶入"
_EXIT_SUFFIX = "驶出"

# =============================================================================
# VALUE OBJECTS
# =============================================================================


@dataclass(frozen=True)
class Card:
    """A toll card registered to the logged-in account."""

    card_no: str
    card_code: str = ""
    card_type: str = ""
    plate_no: str = ""


@dataclass(frozen=True)
class Bill:
    """One toll trip charged to a card."""

    amount: str
    begin_at: datetime
    end_at: datetime
    start_station: str
    end_station: str

    @classmethod
    def from_raw(
        cls,
        total_amount: str,
        start_time_ms: int,
        end_time_ms: int,
        start_station: str,
        end_station: str,
    ) -> Bill:
        """Build a bill from the data source's raw field values.

        Timestamps are truncated to whole seconds and normalized to UTC.
        """
        return cls(
            amount=total_amount,
            begin_at=_from_epoch_ms(start_time_ms),
            end_at=_from_epoch_ms(end_time_ms),
            start_station=start_station.removesuffix(_ENTRY_SUFFIX),
            end_station=end_station.removesuffix(_EXIT_SUFFIX),
        )


@dataclass(frozen=True)
class BillCollection:
    """Bills retrieved for every card in one run."""

    cards: list[Card]
    bills: dict[str, list[Bill]] = field(default_factory=dict[str, list[Bill]])
    skipped: list[str] = field(default_factory=list[str])

    def bills_for(self, card: Card) -> list[Bill]:
        return self.bills.get(card.card_no, [])


def _from_epoch_ms(value: int) -> datetime:
    return datetime.fromtimestamp(value // 1000, tz=UTC)
