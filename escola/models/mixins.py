import uuid
from datetime import date, datetime, timezone
from decimal import Decimal

from escola.extensions import db


def new_id() -> str:
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _plain(value):
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


class TimestampMixin:
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)


class SerializerMixin:
    _hidden = ()

    def to_dict(self) -> dict:
        return {
            col.key: _plain(getattr(self, col.key))
            for col in self.__table__.columns
            if col.key not in self._hidden
        }
