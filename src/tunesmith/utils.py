from datetime import UTC, datetime


def now() -> datetime:
    return datetime.now(UTC)


def mask_sensitive(value: str | None, keep: int = 4) -> str:
    """Return *value* with everything but the first *keep* characters masked."""
    if not value:
        return "-"
    return value[:keep] + "****"
