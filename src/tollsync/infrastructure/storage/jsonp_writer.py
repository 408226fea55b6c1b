"""JSONP rendering and writing of published data files.

Each file is a callback-wrapped array, one record per line, terminated by
``null`` so every record line can end with a comma::

    __yigaosuBills([
    {"Amount":"19","BeginAt":"2023-08-31T10:53:49Z",...},
    null
    ])
"""

from __future__ import annotations

import json
import logging

from collections.abc import Iterable, Mapping
from pathlib import Path

from tollsync.domain.billing.value_objects import Bill, Card
from tollsync.infrastructure.constants import TIMESTAMP_FORMAT, BillField, CardField
from tollsync.shared.exceptions import WriteError
from tollsync.shared.types import FilePath

logger = logging.getLogger(__name__)

# Published files were first written with HTML-safe escaping; keep it so
# unchanged records stay byte-identical.
_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

# =============================================================================
# SERIALIZE
# =============================================================================


def render_jsonp(prefix: str, records: Iterable[Mapping[str, object]]) -> bytes:
    """Render records as ``prefix([ ... null ])``."""
    lines = [f"{prefix}(["]
    for record in records:
        lines.append(_encode(record) + ",")
    lines.append("null")
    lines.append("])")
    return ("\n".join(lines) + "\n").encode("utf-8")


def _encode(record: Mapping[str, object]) -> str:
    text = json.dumps(record, ensure_ascii=False, separators=(",", ":"))
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


def serialize_card(card: Card) -> dict[str, object]:
    return {CardField.CARD_NO: card.card_no}


def serialize_bill(bill: Bill) -> dict[str, object]:
    return {
        BillField.AMOUNT: bill.amount,
        BillField.BEGIN_AT: bill.begin_at.strftime(TIMESTAMP_FORMAT),
        BillField.END_AT: bill.end_at.strftime(TIMESTAMP_FORMAT),
        BillField.FROM: bill.start_station,
        BillField.TO: bill.end_station,
    }


# =============================================================================
# WRITE
# =============================================================================


def write_files(root: Path, files: Mapping[FilePath, bytes]) -> list[FilePath]:
    """Write ``files`` under ``root``, creating parent directories.

    Returns:
        The written relative paths, sorted.

    Raises:
        WriteError: If a file cannot be written.
    """
    written: list[FilePath] = []
    for name in sorted(files):
        path = root / name
        logger.info("Writing %s", path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(files[name])
        except OSError as e:
            raise WriteError(name, str(e)) from e
        written.append(FilePath(name))
    return written
