"""Draft model."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text

from ..database import Base


class Draft(Base):
    """A saved portfolio document, possibly still partial."""

    __tablename__ = "drafts"
    __table_args__ = (
        Index("ix_drafts_email_created_at", "email", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(255), nullable=False)
    html_content = Column(Text, nullable=False)

    # Analyzer verdict at save time
    is_partial = Column(Boolean, nullable=False, default=False)
    estimated_completion = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    @property
    def content_length(self) -> int:
        return len(self.html_content or "")
