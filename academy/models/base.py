import json
import uuid
from datetime import datetime, timezone

from ..extensions import db


def new_id():
    return str(uuid.uuid4())


def utcnow():
    """Naive UTC, the convention for every DateTime column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def iso(value):
    return value.isoformat() if value is not None else None


def loads_or_raw(raw):
    """Decode a serialized JSON column, returning the raw text if it is not JSON."""
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except (TypeError, ValueError):
        return raw


class UUIDPrimaryKeyMixin:
    id = db.Column(db.String(36), primary_key=True, default=new_id)


class TimestampMixin:
    created_at = db.Column(db.DateTime, default=utcnow, server_default=db.func.now())
    updated_at = db.Column(db.DateTime, default=utcnow, server_default=db.func.now(), onupdate=utcnow)
