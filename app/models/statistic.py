import uuid

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column
from app.db.session import Base
from app.models.common import TimestampMixin, uuid_pk

class Statistic(Base, TimestampMixin):
    __tablename__ = "statistics"
    id: Mapped[uuid.UUID] = uuid_pk("statistic_id")
    name: Mapped[str] = mapped_column(String(36), unique=True, nullable=False)
    count: Mapped[int] = mapped_column(BigInteger, default=0, nullable=False)
