import uuid

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.models.common import TimestampMixin, uuid_pk

ROLE_ADMIN = "ADMIN"
ROLE_MEMBER = "MEMBER"

class User(Base, TimestampMixin):
    __tablename__ = "users"
    id: Mapped[uuid.UUID] = uuid_pk("user_id")
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    full_name: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=ROLE_MEMBER)  # ADMIN|MEMBER

    @property
    def is_admin(self) -> bool:
        return str(self.role or "").strip().upper() == ROLE_ADMIN
