"""Vote and report bookkeeping.

Each user holds at most one vote and at most one report per post or comment.
Recording or retracting one changes the engagement row and the matching
denormalized counter in the same transaction; the caller commits.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from babel_board.core.errors import ConflictError, NotFoundError
from babel_board.models import Report, Vote
from babel_board.repositories.counter_store import CounterStore
from babel_board.services.targets import PostTarget, Target, target_columns

logger = logging.getLogger(__name__)

DEFAULT_REPORT_REASON = "لم يتم تحديد السبب"


@dataclass(frozen=True)
class VoteResult:
    """Outcome of a vote change: the target and its new vote count."""

    target: Target
    votes: int
    voted: bool


@dataclass(frozen=True)
class ReportResult:
    """Outcome of a report change: the target and its new report count."""

    target: Target
    report_count: int
    reported: bool


def _link_clause(model: type[Vote] | type[Report], user_id: int, target: Target):
    column = model.post_id if isinstance(target, PostTarget) else model.comment_id
    return (model.user_id == user_id, column == target.id)


class EngagementRecorder:
    """Apply and retract votes and reports while keeping counters exact."""

    def __init__(self, session: Session, counters: CounterStore | None = None) -> None:
        self.session = session
        self.counters = counters or CounterStore(session)

    # Votes

    def apply_vote(self, user_id: int, target: Target) -> VoteResult:
        """Record an upvote by ``user_id`` on ``target``.

        Raises:
            NotFoundError: If the target does not exist.
            ConflictError: With ``DUPLICATE_VOTE`` if the user already voted.
        """
        self._require_target(target)
        if self.has_voted(user_id, target):
            raise ConflictError("You have already voted on this item", code="DUPLICATE_VOTE")

        vote = Vote(user_id=user_id, **target_columns(target))
        self._insert_once(vote, code="DUPLICATE_VOTE")
        votes = self.counters.increment(target, "votes", 1)
        logger.info("User %s voted on %s %s (votes=%s)", user_id, target.kind, target.id, votes)
        return VoteResult(target=target, votes=votes, voted=True)

    def retract_vote(self, user_id: int, target: Target) -> VoteResult:
        """Remove the user's vote on ``target``.

        Raises:
            NotFoundError: If the target does not exist (``POST_NOT_FOUND`` or
                ``COMMENT_NOT_FOUND``) or holds no vote by the user
                (``VOTE_NOT_FOUND``).
        """
        self._require_target(target)
        if not self._delete_link(Vote, user_id, target):
            raise NotFoundError("No vote to retract", code="VOTE_NOT_FOUND")
        votes = self.counters.increment(target, "votes", -1)
        logger.info("User %s retracted vote on %s %s (votes=%s)", user_id, target.kind, target.id, votes)
        return VoteResult(target=target, votes=votes, voted=False)

    def has_voted(self, user_id: int, target: Target) -> bool:
        return self._exists(Vote, user_id, target)

    def voted_post_ids(self, user_id: int | None, post_ids: Iterable[int]) -> set[int]:
        """Return the subset of ``post_ids`` the user has voted on (one query)."""
        return self._linked_ids(Vote, Vote.post_id, user_id, post_ids)

    def voted_comment_ids(self, user_id: int | None, comment_ids: Iterable[int]) -> set[int]:
        return self._linked_ids(Vote, Vote.comment_id, user_id, comment_ids)

    # Reports

    def apply_report(
        self,
        user_id: int,
        target: Target,
        reason: str | None = None,
    ) -> ReportResult:
        """Record a report by ``user_id`` on ``target``.

        Raises:
            NotFoundError: If the target does not exist.
            ConflictError: With ``DUPLICATE_REPORT`` if the user already reported it.
        """
        self._require_target(target)
        if self.has_reported(user_id, target):
            raise ConflictError("You have already reported this item", code="DUPLICATE_REPORT")

        report = Report(
            user_id=user_id,
            reason=(reason or "").strip() or DEFAULT_REPORT_REASON,
            **target_columns(target),
        )
        self._insert_once(report, code="DUPLICATE_REPORT")
        count = self.counters.increment(target, "report_count", 1)
        logger.info(
            "User %s reported %s %s (report_count=%s)",
            user_id,
            target.kind,
            target.id,
            count,
        )
        return ReportResult(target=target, report_count=count, reported=True)

    def retract_report(self, user_id: int, target: Target) -> ReportResult:
        """Withdraw the user's report on ``target``.

        Raises:
            NotFoundError: If the target does not exist or holds no report by
                the user (``REPORT_NOT_FOUND``).
        """
        self._require_target(target)
        if not self._delete_link(Report, user_id, target):
            raise NotFoundError("No report to retract", code="REPORT_NOT_FOUND")
        count = self.counters.increment(target, "report_count", -1)
        logger.info(
            "User %s retracted report on %s %s (report_count=%s)",
            user_id,
            target.kind,
            target.id,
            count,
        )
        return ReportResult(target=target, report_count=count, reported=False)

    def has_reported(self, user_id: int, target: Target) -> bool:
        return self._exists(Report, user_id, target)

    def reported_post_ids(self, user_id: int | None, post_ids: Iterable[int]) -> set[int]:
        """Return the subset of ``post_ids`` the user has reported (one query)."""
        return self._linked_ids(Report, Report.post_id, user_id, post_ids)

    def reported_comment_ids(self, user_id: int | None, comment_ids: Iterable[int]) -> set[int]:
        return self._linked_ids(Report, Report.comment_id, user_id, comment_ids)

    # Helpers

    def _require_target(self, target: Target) -> None:
        if self.session.get(target.model, target.id) is None:
            kind = "POST" if isinstance(target, PostTarget) else "COMMENT"
            raise NotFoundError(
                f"{target.kind.capitalize()} {target.id} not found",
                code=f"{kind}_NOT_FOUND",
            )

    def _insert_once(self, row: Vote | Report, *, code: str) -> None:
        # The unique constraints are the final arbiter when two requests race
        # past the existence check.
        try:
            with self.session.begin_nested():
                self.session.add(row)
        except IntegrityError as exc:
            raise ConflictError("This action was already recorded", code=code) from exc

    def _delete_link(self, model: type[Vote] | type[Report], user_id: int, target: Target) -> bool:
        stmt = delete(model).where(*_link_clause(model, user_id, target))
        result = self.session.execute(stmt)
        return bool(result.rowcount)

    def _exists(self, model: type[Vote] | type[Report], user_id: int, target: Target) -> bool:
        stmt = select(model.id).where(*_link_clause(model, user_id, target)).limit(1)
        return self.session.execute(stmt).first() is not None

    def _linked_ids(self, model, column, user_id: int | None, ids: Iterable[int]) -> set[int]:
        wanted = set(ids)
        if user_id is None or not wanted:
            return set()
        stmt = select(column).where(model.user_id == user_id, column.in_(wanted))
        return {value for value in self.session.execute(stmt).scalars()}
