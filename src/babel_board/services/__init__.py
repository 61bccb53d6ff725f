"""Business logic services for the Babel Board application."""

from .engagement import EngagementRecorder, ReportResult, VoteResult
from .feed_cache import FeedCache, MemoryFeedCache, NullFeedCache, RedisFeedCache
from .targets import CommentTarget, PostTarget, Target

__all__ = [
    "EngagementRecorder", "ReportResult", "VoteResult",
    "FeedCache", "MemoryFeedCache", "NullFeedCache", "RedisFeedCache",
    "CommentTarget", "PostTarget", "Target",
]
