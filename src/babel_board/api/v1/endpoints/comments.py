# src/babel_board/api/v1/endpoints/comments.py
"""Comment-related endpoints for the Babel Board API."""

from fastapi import APIRouter, status

from babel_board.schemas.comment import CommentCreate, CommentSummary, CommentUpdate
from babel_board.services import content

from ..dependencies import CurrentUserDep, SessionDep

router = APIRouter(prefix="/comments", tags=["comments"])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=CommentSummary)
async def create_comment(
    comment_data: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> CommentSummary:
    """Reply to a post, or to a comment when ``parent_id`` is given."""
    comment = content.create_comment(
        db,
        post_id=comment_data.post_id,
        author_id=current_user.id,
        text=comment_data.text,
        parent_id=comment_data.parent_id,
    )
    db.commit()
    return content.to_comment_summary(comment, current_user.username)


@router.patch("/{comment_id}", response_model=CommentSummary)
async def update_comment(
    comment_id: int,
    comment_data: CommentUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> CommentSummary:
    comment = content.edit_comment(
        db,
        comment_id=comment_id,
        user_id=current_user.id,
        text=comment_data.text,
    )
    db.commit()
    return content.to_comment_summary(comment, current_user.username)


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> None:
    """Soft-delete a comment (author or moderator)."""
    content.hide_comment(db, comment_id=comment_id, user_id=current_user.id)
    db.commit()
