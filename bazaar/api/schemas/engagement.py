"""
Engagement schemas.
Likes and comments.
"""

from datetime import datetime
from typing import List
from uuid import UUID

from pydantic import BaseModel, Field


class LikeSummaryResponse(BaseModel):
    product_id: UUID
    like_count: int = Field(..., ge=0, description="Number of likes")
    liked: bool = Field(..., description="Whether the viewer likes the product")
    admin_endorsed: bool = Field(..., description="Whether an admin likes the product")


class CommentCreateRequest(BaseModel):
    comment_text: str = Field(..., min_length=1, max_length=2000, description="Comment body")


class CommentResponse(BaseModel):
    id: UUID
    product_id: UUID
    seller_id: UUID
    author_name: str = Field(..., description="Full name, else email, else 'Seller'")
    comment_text: str
    created_at: datetime

    model_config = {"from_attributes": True}


class CommentFeedResponse(BaseModel):
    comments: List[CommentResponse] = Field(..., description="Newest first")
    own_count: int = Field(..., description="Comments the viewer has posted on this product")
    quota: int = Field(..., description="Maximum comments per author per product")
    can_post: bool = Field(..., description="Whether the viewer may post now")
