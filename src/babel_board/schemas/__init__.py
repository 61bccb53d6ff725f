"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentSummary, CommentUpdate, ThreadComment
from .common import ErrorDetail, MonthCount
from .engagement import ReportRequest, ReportResponse, VoteRequest, VoteResponse
from .feed import CommentFeedPage, CursorFeedPage, RankedFeedPage, RankedPost
from .post import PostCreate, PostDetail, PostSummary, PostUpdate

__all__ = [
    "CommentCreate", "CommentSummary", "CommentUpdate", "ThreadComment",
    "ErrorDetail", "MonthCount",
    "ReportRequest", "ReportResponse", "VoteRequest", "VoteResponse",
    "CommentFeedPage", "CursorFeedPage", "RankedFeedPage", "RankedPost",
    "PostCreate", "PostDetail", "PostSummary", "PostUpdate",
]
