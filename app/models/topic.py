import uuid

from sqlalchemy import ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.models.common import TimestampMixin, uuid_pk

class Topic(Base, TimestampMixin):
    __tablename__ = "topics"
    id: Mapped[uuid.UUID] = uuid_pk("topic_id")
    # Nullable only for legacy rows waiting for the short id backfill.
    short_id: Mapped[str | None] = mapped_column(String(255), unique=True, nullable=True)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False, default="")
    comments_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    category_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False
    )
    score: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Filled in by read paths, never persisted.
    user = None
    category = None

    def __repr__(self) -> str:
        return f"<Topic(id={self.id}, short_id={self.short_id})>"

Index("ix_topics_created_at", Topic.created_at.desc())
Index("ix_topics_user_created", Topic.user_id, Topic.created_at.desc())
Index("ix_topics_category_created", Topic.category_id, Topic.created_at.desc())
Index("ix_topics_score_created", Topic.score.desc(), Topic.created_at.desc())
