"""Key-value row model backing the durable store."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy.orm import Mapped, mapped_column

from selfmonitor.extensions import db


class KeyValueEntry(db.Model):
    __tablename__ = "kv_entry"

    key: Mapped[str] = mapped_column(db.String(191), primary_key=True)
    value: Mapped[str] = mapped_column(db.Text, nullable=False, default="")
    updated_at: Mapped[datetime] = mapped_column(default=datetime.utcnow, onupdate=datetime.utcnow)
