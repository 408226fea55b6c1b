"""Fixtures for billing domain tests."""

from __future__ import annotations

import pytest

from tollsync.domain.billing.value_objects import Card


@pytest.fixture
def card() -> Card:
    return Card(card_no="44010000000000000001", card_code="1", plate_no="粤A00001")


@pytest.fixture
def other_card() -> Card:
    return Card(card_no="44010000000000000002", card_code="1", plate_no="粤A00002")
