from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, text
from sqlalchemy.dialects.postgresql import TIMESTAMP
from sqlalchemy.orm import Mapped, mapped_column

from match_chat.infrastructure.db.base import Base


class UserActivityModel(Base):
    __tablename__ = "user_activity"

    user_id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    is_online: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false"),
    )
    last_active: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
