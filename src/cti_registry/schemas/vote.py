"""Vote-related Pydantic schemas."""

from pydantic import BaseModel, Field


class VoteCreate(BaseModel):
    """Schema for casting a vote."""

    is_upvote: bool = Field(..., description="True for an upvote, False for a downvote")


class HasVotedResponse(BaseModel):
    id: int
    voter: str
    has_voted: bool
