"""Yigaosu toll service client."""

from __future__ import annotations

import logging

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import TypeVar

import httpx

from pydantic import ValidationError

from tollsync.domain.billing.value_objects import Bill, Card
from tollsync.infrastructure.constants import (
    YIGAOSU_LOGIN_FORM,
    YIGAOSU_OK_CODE,
    YigaosuAPI,
)
from tollsync.infrastructure.yigaosu.models import (
    BillListResponse,
    CardListResponse,
    Envelope,
    LoginResponse,
)
from tollsync.shared.constants import DEBUG_BODY_LIMIT, DEFAULT_TIMEOUT_SECONDS
from tollsync.shared.exceptions import RetrievalError

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Envelope)

_STATUS_OK_MAX = 299


# =============================================================================
# CLIENT
# =============================================================================


@dataclass
class YigaosuClient:
    """Authenticated session against the Yigaosu mobile API.

    Implements ``BillingSource``. Build one with ``YigaosuClient.login``.
    """

    access_token: str
    debug: bool = False
    base_url: str = YigaosuAPI.BASE_URL

    @classmethod
    def login(
        cls,
        phone: str,
        encrypted_password: str,
        *,
        debug: bool = False,
        base_url: str = YigaosuAPI.BASE_URL,
    ) -> YigaosuClient:
        """Log in with a phone number and the app-encrypted password.

        Raises:
            RetrievalError: If the request fails or the login is refused.
        """
        anonymous = cls(access_token="", debug=debug, base_url=base_url)
        form = {
            **YIGAOSU_LOGIN_FORM,
            "login_name": phone,
            "login_password": encrypted_password,
        }
        response = anonymous._send(
            "POST",
            YigaosuAPI.LOGIN_PATH,
            LoginResponse,
            dataset="login",
            data=form,
        )
        if response.data is None:
            raise RetrievalError("login", "no login data found")
        logger.info("Logged in as %s", phone)
        return cls(
            access_token=response.data.access_token,
            debug=debug,
            base_url=base_url,
        )

    def list_cards(self) -> list[Card]:
        """Fetch the ETC cards of the current user.

        Raises:
            RetrievalError: If the API call fails.
        """
        response = self._send(
            "POST", YigaosuAPI.CARDS_PATH, CardListResponse, dataset="cards"
        )
        cards = [payload.to_card() for payload in response.data or []]
        logger.info("Found %d cards", len(cards))
        return cards

    def get_bills_page(self, card: Card, page_size: int, page: int) -> list[Bill]:
        """Fetch one page of a card's bills.

        Args:
            card: The card to list bills for.
            page_size: Bills per page, 1 to 200.
            page: 1-based page number.

        Raises:
            RetrievalError: If the API call fails.
        """
        params = {
            "plateNo": card.plate_no,
            "cardNo": card.card_no,
            "cardType": card.card_code,
            "startDate": "0",
            "endDate": end_of_month_ms(datetime.now().astimezone()),
            "limit": str(page_size),
            "page": str(page),
        }
        response = self._send(
            "GET",
            YigaosuAPI.BILLS_PATH,
            BillListResponse,
            dataset=f"bills of card {card.card_no} (page {page})",
            params=params,
        )
        if response.data is None:
            return []
        return [payload.to_bill() for payload in response.data.bill_list]

    # =================================================================
    # HTTP helpers
    # =================================================================

    def _send(
        self,
        method: str,
        path: str,
        model: type[E],
        *,
        dataset: str,
        data: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
    ) -> E:
        url = f"{self.base_url}{path}"
        headers: dict[str, str] = {}
        if self.access_token:
            headers[YigaosuAPI.TOKEN_HEADER] = self.access_token

        try:
            with httpx.Client(timeout=DEFAULT_TIMEOUT_SECONDS) as client:
                request = client.build_request(
                    method, url, data=data, params=params, headers=headers
                )
                self._debug_request(request)
                response = client.send(request)
        except httpx.HTTPError as e:
            raise RetrievalError(dataset, f"{YigaosuAPI.PROVIDER_NAME} error: {e}") from e

        self._debug_response(response)
        if response.status_code > _STATUS_OK_MAX:
            raise RetrievalError(
                dataset, f"HTTP {response.status_code}: {response.text}"
            )

        try:
            envelope = model.model_validate_json(response.content)
        except ValidationError as e:
            raise RetrievalError(dataset, f"unexpected response: {e}") from e

        if envelope.code != YIGAOSU_OK_CODE:
            raise RetrievalError(
                dataset,
                f"error status: {envelope.code}, message: {envelope.message}",
            )
        return envelope

    def _debug_request(self, request: httpx.Request) -> None:
        if not self.debug:
            return
        logger.debug("> %s %s", request.method, request.url)
        for name, value in request.headers.items():
            logger.debug("> %s: %s", name, value)
        if request.content:
            logger.debug("> %s", request.content.decode(errors="replace"))

    def _debug_response(self, response: httpx.Response) -> None:
        if not self.debug:
            return
        logger.debug("< HTTP %d", response.status_code)
        for name, value in response.headers.items():
            logger.debug("< %s: %s", name, value)
        body = response.text
        if len(body) > DEBUG_BODY_LIMIT:
            body = body[:DEBUG_BODY_LIMIT] + " ..."
        logger.debug("< %s", body)


def end_of_month_ms(now: datetime) -> str:
    """Last second of ``now``'s month as epoch milliseconds.

    The API expects a millisecond timestamp with whole-second precision.
    """
    if now.month == 12:
        first_of_next = now.replace(year=now.year + 1, month=1, day=1)
    else:
        first_of_next = now.replace(month=now.month + 1, day=1)
    first_of_next = first_of_next.replace(hour=0, minute=0, second=0, microsecond=0)
    last_second = first_of_next - timedelta(seconds=1)
    return f"{int(last_second.timestamp())}000"
