import uuid

from sqlalchemy import Integer, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.models.common import TimestampMixin, uuid_pk

class Category(Base, TimestampMixin):
    __tablename__ = "categories"
    id: Mapped[uuid.UUID] = uuid_pk("category_id")
    name: Mapped[str] = mapped_column(String(36), nullable=False)
    alias: Mapped[str] = mapped_column(String(128), unique=True, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Denormalized from topics; written by topic creation and dispersal only.
    topics_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_topic_id: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)
    position: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
