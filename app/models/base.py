from datetime import datetime, timezone
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator, DateTime as SA_DateTime


class Base(DeclarativeBase):
    pass


class UTCDateTime(TypeDecorator[datetime]):
    """Stores aware datetimes as UTC; SQLite drops tzinfo, so results are re-tagged."""

    impl = SA_DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect):
        if value is None:
            return None
        return _as_utc(value)

    def process_result_value(self, value: datetime | None, dialect):
        if value is None:
            return None
        return _as_utc(value)


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
