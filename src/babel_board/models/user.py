# src/babel_board/models/user.py
"""SQLAlchemy models for board members and their standing."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from babel_board.db.session import Base
from babel_board.db.time import utcnow

ROLE_USER = "user"
ROLE_MODERATOR = "moderator"


class User(Base):
    """Account identity owned by the (external) authentication service."""

    __tablename__ = "board_user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(Text, unique=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )

    standing: Mapped[UserStanding | None] = relationship(
        "UserStanding",
        back_populates="user",
        cascade="all, delete-orphan",
        uselist=False,
    )


class UserStanding(Base):
    """Per-user mutable reputation and moderation state.

    One row per user, created lazily the first time it is needed.
    """

    __tablename__ = "user_standing"
    __table_args__ = (
        Index("ix_user_standing_karma", "karma"),
        Index("ix_user_standing_role", "role"),
    )

    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("board_user.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # Float so that decayed karma updates stay smooth.
    karma: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    karma_last_updated: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    role: Mapped[str] = mapped_column(Text, nullable=False, default=ROLE_USER)
    verified: Mapped[bool] = mapped_column(default=False, nullable=False)

    banned_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    muted_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    ban_reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    mute_reason: Mapped[str | None] = mapped_column(Text, nullable=True)

    user: Mapped[User] = relationship("User", back_populates="standing")

    @property
    def is_moderator(self) -> bool:
        """Return True when the user holds the moderator role."""
        return self.role == ROLE_MODERATOR
