from sqlalchemy import Column, String, Text, DateTime
from .database import Base
from datetime import datetime, timezone


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class KeyValueEntry(Base):
    """One persisted key. Values are opaque serialized strings."""
    __tablename__ = "kv_store"
    key = Column(String, primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow)
