from typing import Optional

from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy import JSON, String, DateTime, func
from sqlalchemy.dialects.postgresql import JSONB


class Base(DeclarativeBase):
    pass


class UserSession(Base):
    __tablename__ = "user_sessions"
    # chat id as a string
    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    user_key: Mapped[str] = mapped_column(String(64))
    type: Mapped[str] = mapped_column(String(16), index=True)

    # conversation context replayed to the NLU service every turn
    context: Mapped[dict] = mapped_column(JSON().with_variant(JSONB, "postgresql"), default=dict)

    # context.user.id, indexed for the reminder lookup
    user_id: Mapped[Optional[str]] = mapped_column(String(64), index=True, nullable=True)

    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
