from __future__ import annotations

import time
from datetime import datetime, timezone

from hashids import Hashids

from app.core.config import settings
from app.core.errors import ServerError

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _hashids() -> Hashids:
    return Hashids(salt=settings.SHORT_ID_SALT, min_length=settings.SHORT_ID_MIN_LENGTH)


def timestamp_nanos(moment: datetime | int | None = None) -> int:
    if moment is None:
        return time.time_ns()
    if isinstance(moment, int):
        return moment
    if moment.tzinfo is None:
        # Naive values come back from SQLite; they are stored as UTC.
        moment = moment.replace(tzinfo=timezone.utc)
    delta = moment - _EPOCH
    return (delta.days * 86_400 + delta.seconds) * 1_000_000_000 + delta.microseconds * 1_000


def generate_short_id(moment: datetime | int | None = None) -> str:
    """Encode a nanosecond timestamp into a short, reversible token.

    Uniqueness is not checked here; the unique index on ``topics.short_id``
    rejects duplicates.
    """
    nanos = timestamp_nanos(moment)
    short_id = _hashids().encode(nanos)
    if not short_id:
        raise ServerError(f"short id can not be generated for timestamp {nanos}")
    return short_id


def decode_short_id(short_id: str) -> int | None:
    values = _hashids().decode(str(short_id or ""))
    if len(values) != 1:
        return None
    return int(values[0])
