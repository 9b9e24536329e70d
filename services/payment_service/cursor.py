"""
Pagination cursor codec.

token = base64url_no_padding(ascii("<epochMillis>:<id>"))

The format is handed to clients and may be stored by them; keep it stable.
Anything that does not decode cleanly is treated as "no cursor".
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from shared.encoding import b64url_decode, b64url_encode

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
_ONE_MILLI = timedelta(milliseconds=1)


def truncate_to_millis(value: datetime) -> datetime:
    return value.replace(microsecond=value.microsecond - value.microsecond % 1000)


def encode_cursor(created_at: Optional[datetime], payment_id: Optional[int]) -> Optional[str]:
    if created_at is None or payment_id is None:
        return None
    # Naive timestamps come back from stores without zone support; they are UTC.
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    millis = (created_at - EPOCH) // _ONE_MILLI
    return b64url_encode(f"{millis}:{payment_id}".encode("ascii"))


def decode_cursor(cursor: Optional[str]) -> Tuple[Optional[datetime], Optional[int]]:
    if cursor is None or not cursor.strip():
        return None, None
    try:
        raw = b64url_decode(cursor.strip()).decode("ascii")
        millis_part, id_part = raw.split(":")
        if not (millis_part.lstrip("-").isdigit() and id_part.isdigit()):
            return None, None
        created_at = EPOCH + int(millis_part) * _ONE_MILLI
        payment_id = int(id_part)
    except (ValueError, OverflowError):
        return None, None
    return created_at, payment_id
