"""ORM Models for the BuildSheet document store — SQLAlchemy 2.0"""
from datetime import datetime

from sqlalchemy import DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from buildsheet.db import Base


# ── DOCUMENTS ────────────────────────────────────────────────────────────────
class StoredDocument(Base):
    """One key/value row per persisted document (session, index, active pointer)."""
    __tablename__ = "stored_documents"
    key: Mapped[str] = mapped_column(String(255), primary_key=True)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    byte_size: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
