# src/babel_board/api/v1/endpoints/posts.py
"""Post-related endpoints for the Babel Board API."""

from fastapi import APIRouter, status

from babel_board.schemas.post import PostCreate, PostDetail, PostSummary, PostUpdate
from babel_board.services import content

from ..dependencies import CurrentUserDep, OptionalUserDep, SessionDep

router = APIRouter(prefix="/posts", tags=["posts"])


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=PostSummary)
async def create_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PostSummary:
    """Submit a new post."""
    post = content.create_post(
        db,
        author_id=current_user.id,
        title=post_data.title,
        url=post_data.url,
        text=post_data.text,
    )
    db.commit()
    return content.to_post_summary(post, current_user.username)


@router.get("/{post_id}", response_model=PostDetail)
async def get_post(
    post_id: int,
    db: SessionDep,
    user: OptionalUserDep,
) -> PostDetail:
    """Return a visible post with its comment thread."""
    return content.get_post_with_thread(db, post_id, user.id if user else None)


@router.patch("/{post_id}", response_model=PostSummary)
async def update_post(
    post_id: int,
    post_data: PostUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PostSummary:
    """Edit a post; only the author may, and only within the edit window."""
    changes = post_data.model_dump(exclude_unset=True)
    post = content.edit_post(db, post_id=post_id, user_id=current_user.id, **changes)
    db.commit()
    return content.to_post_summary(post, current_user.username)


@router.delete("/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: int,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> None:
    """Soft-delete a post (author or moderator)."""
    content.hide_post(db, post_id=post_id, user_id=current_user.id)
    db.commit()
