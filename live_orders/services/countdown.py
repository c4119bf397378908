from datetime import datetime


def _as_datetime(value: datetime | str) -> datetime:
    if isinstance(value, datetime):
        return value
    # Persisted timestamps may come back as ISO-8601 text ("Z" suffix included)
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def elapsed(start: datetime | str, now: datetime | str | None = None) -> str:
    """
    Time elapsed since ``start`` formatted as HH:MM:SS.

    Hours are not wrapped at 24. If ``now`` is earlier than ``start`` the result is
    clamped to "00:00:00". A naive timestamp compared against an aware one is taken
    as local time.
    """
    start_dt = _as_datetime(start)
    now_dt = _as_datetime(now) if now is not None else datetime.now()

    if (start_dt.tzinfo is None) != (now_dt.tzinfo is None):
        start_dt = start_dt.astimezone()
        now_dt = now_dt.astimezone()

    total_seconds = max(0, int((now_dt - start_dt).total_seconds()))
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
