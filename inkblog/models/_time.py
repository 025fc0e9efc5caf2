from datetime import UTC, datetime


def utcnow() -> datetime:
    """Timezone-aware now truncated to whole seconds."""
    return datetime.now(tz=UTC).replace(microsecond=0)
