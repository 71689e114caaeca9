from datetime import date, datetime, timezone


def normalize_date(value):
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        value_text = value.strip()
        if not value_text:
            return None
        try:
            return date.fromisoformat(value_text)
        except ValueError:
            return None
    return None


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime | None) -> datetime | None:
    """SQLite hands back naive datetimes; treat those as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_until(target, today: date | None = None) -> int | None:
    target_date = normalize_date(target)
    if target_date is None:
        return None
    today = today or utc_now().date()
    return (target_date - today).days


def utc_or_now(value: datetime | None) -> datetime:
    """Event time to store. SQLite drops the offset, so only UTC goes in."""
    if value is None:
        return utc_now()
    return as_utc(value)
