# src/babel_board/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Babel Board API."""

from fastapi import APIRouter, status

from babel_board.schemas.engagement import VoteRequest, VoteResponse
from babel_board.services.engagement import EngagementRecorder, VoteResult
from babel_board.services.targets import target_columns, target_from_ids

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/votes", tags=["votes"])


def _to_response(result: VoteResult) -> VoteResponse:
    return VoteResponse(**target_columns(result.target), votes=result.votes, voted=result.voted)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=VoteResponse)
async def cast_vote(
    vote_data: VoteRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> VoteResponse:
    """Upvote a post or a comment. Voting twice is rejected with 409."""
    target = target_from_ids(vote_data.post_id, vote_data.comment_id)
    result = EngagementRecorder(db).apply_vote(current_user.id, target)
    db.commit()
    return _to_response(result)


@router.delete("/", response_model=VoteResponse)
async def retract_vote(
    vote_data: VoteRequest,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> VoteResponse:
    """Withdraw the caller's vote on a post or a comment."""
    target = target_from_ids(vote_data.post_id, vote_data.comment_id)
    result = EngagementRecorder(db).retract_vote(current_user.id, target)
    db.commit()
    return _to_response(result)
