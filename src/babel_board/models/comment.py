# src/babel_board/models/comment.py
"""SQLAlchemy model for threaded comments."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from babel_board.db.session import Base
from babel_board.db.time import utcnow


class Comment(Base):
    """Reply attached to a post, optionally nested under another comment.

    Top-level comments have ``parent_id = NULL``. A parent must exist when a
    reply is created, so the parent edges form a forest per post.
    """

    __tablename__ = "comment"
    __table_args__ = (
        Index("ix_comment_post_id", "post_id"),
        Index("ix_comment_parent_id", "parent_id"),
        Index("ix_comment_author_id", "author_id"),
        Index("ix_comment_created_at_id", "created_at", "id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(Integer, ForeignKey("post.id"), nullable=False)
    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("comment.id"),
        nullable=True,
    )
    author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("board_user.id"),
        nullable=False,
    )
    text: Mapped[str] = mapped_column(Text, nullable=False)

    votes: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    report_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
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
