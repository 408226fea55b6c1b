"""Response models for the Yigaosu API."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from tollsync.domain.billing.value_objects import Bill, Card


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Envelope(_Payload):
    """Fields shared by every response."""

    code: int
    message: str = ""


# =============================================================================
# LOGIN
# =============================================================================


class LoginData(_Payload):
    access_token: str


class LoginResponse(Envelope):
    data: LoginData | None = None


# =============================================================================
# CARDS
# =============================================================================


class CardPayload(_Payload):
    card_code: str = Field(default="", alias="cardCode")
    card_no: str = Field(alias="cardNo")
    card_type: str = Field(default="", alias="cardType")
    plate_no: str = Field(default="", alias="plateNo")

    def to_card(self) -> Card:
        return Card(
            card_no=self.card_no,
            card_code=self.card_code,
            card_type=self.card_type,
            plate_no=self.plate_no,
        )


class CardListResponse(Envelope):
    data: list[CardPayload] | None = None


# =============================================================================
# BILLS
# =============================================================================


class BillPayload(_Payload):
    amount: str = ""
    bill_id: str = Field(default="", alias="billid")
    total_amount: str = Field(default="", alias="totalAmount")
    start_time: int = Field(default=0, alias="startTime")
    end_time: int = Field(default=0, alias="endTime")
    start_station: str = Field(default="", alias="startStation")
    end_station: str = Field(default="", alias="endStation")
    plate_no: str = Field(default="", alias="plateNo")

    def to_bill(self) -> Bill:
        return Bill.from_raw(
            total_amount=self.total_amount,
            start_time_ms=self.start_time,
            end_time_ms=self.end_time,
            start_station=self.start_station,
            end_station=self.end_station,
        )


class BillListData(_Payload):
    bill_list: list[BillPayload] = Field(default_factory=list, alias="billList")


class BillListResponse(Envelope):
    data: BillListData | None = None
