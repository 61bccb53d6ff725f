# src/babel_board/models/report.py
"""Audit rows recording who reported which piece of content and why."""

from datetime import datetime

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from babel_board.db.session import Base
from babel_board.db.time import utcnow


class Report(Base):
    """Per-user report on exactly one post or one comment."""

    __tablename__ = "report"
    __table_args__ = (
        CheckConstraint(
            "(post_id IS NULL) <> (comment_id IS NULL)",
            name="ck_report_single_target",
        ),
        UniqueConstraint("user_id", "post_id", name="uq_report_user_post"),
        UniqueConstraint("user_id", "comment_id", name="uq_report_user_comment"),
        Index("ix_report_post_id", "post_id"),
        Index("ix_report_comment_id", "comment_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("board_user.id"),
        nullable=False,
    )
    post_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("post.id"),
        nullable=True,
    )
    comment_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("comment.id"),
        nullable=True,
    )
    reason: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
    )
