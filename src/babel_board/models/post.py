# src/babel_board/models/post.py
"""SQLAlchemy model for posts."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from babel_board.db.session import Base
from babel_board.db.time import utcnow


class Post(Base):
    """Top-level submission: a title plus an optional link and/or body text.

    ``votes``, ``comment_count`` and ``report_count`` are denormalized caches
    of the child row counts and are only ever changed through relative
    deltas (see ``CounterStore``).
    """

    __tablename__ = "post"
    __table_args__ = (
        Index("ix_post_created_at_id", "created_at", "id"),
        Index("ix_post_author_id", "author_id"),
        Index("ix_post_hidden", "hidden"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    text: Mapped[str | None] = mapped_column(Text, nullable=True)
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("board_user.id"),
        nullable=False,
    )

    votes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    comment_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    report_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Soft delete; rows are never physically removed.
    hidden: Mapped[bool] = mapped_column(default=False, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
