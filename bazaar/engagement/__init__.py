"""
Engagement
Likes and comments on products.
"""

from .comments import CommentFeed, CommentService, CommentView, quota_allows
from .likes import LikeService, LikeSummary, is_admin_endorsed

__all__ = [
    "CommentFeed",
    "CommentService",
    "CommentView",
    "quota_allows",
    "LikeService",
    "LikeSummary",
    "is_admin_endorsed",
]
