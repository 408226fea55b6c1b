"""Infrastructure-layer constants and enums.

Eliminates magic strings across all infrastructure modules.
"""

from __future__ import annotations

from enum import StrEnum

# =============================================================================
# PROVIDER CONSTANTS
# =============================================================================


class YigaosuAPI(StrEnum):
    """Yigaosu mobile API constants."""

    BASE_URL = "https://eapi.yigaosu.com"
    LOGIN_PATH = "/login/loginByPassWord"
    CARDS_PATH = "/etcCard/plateNo"
    BILLS_PATH = "/etcCard/etcBillList"
    TOKEN_HEADER = "access_token"
    PROVIDER_NAME = "yigaosu"


YIGAOSU_OK_CODE = 200
"""Application-level success code inside every response envelope."""

# Device fingerprint sent by the official iOS app on login.
YIGAOSU_LOGIN_FORM: dict[str, str] = {
    "appVersion": "5.2.7",
    "client_id": "00000000-0000-0000-0000-000000000000",
    "model": "iPhone 13",
    "os": "ios",
    "osVersion": "16.6",
    "state": "1",
    "type": "cipher",
}


# =============================================================================
# SERIALIZER FIELD NAMES
# =============================================================================


class BillField(StrEnum):
    """JSON field names of a published bill."""

    AMOUNT = "Amount"
    BEGIN_AT = "BeginAt"
    END_AT = "EndAt"
    FROM = "From"
    TO = "To"


class CardField(StrEnum):
    """JSON field names of a published card."""

    CARD_NO = "CardNo"


TIMESTAMP_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
