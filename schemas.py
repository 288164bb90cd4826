from pydantic import BaseModel, Field
from typing import Annotated, List, Optional
from datetime import datetime


NonEmptyStr = Annotated[str, Field(min_length=1)]


class ErrorDetail(BaseModel):
    code: str
    message: str


class ErrorResponse(BaseModel):
    error: ErrorDetail


class TeamMember(BaseModel):
    user_id: NonEmptyStr
    username: str
    is_active: bool = True


class TeamRequest(BaseModel):
    team_name: NonEmptyStr
    members: List[TeamMember]


class TeamResponse(BaseModel):
    team_name: str
    members: List[TeamMember]


class TeamCreateResponse(BaseModel):
    team: TeamResponse


class UserResponse(BaseModel):
    user_id: str
    username: str
    team_name: str
    is_active: bool


class UserUpdateResponse(BaseModel):
    user: UserResponse


class SetIsActiveRequest(BaseModel):
    user_id: NonEmptyStr
    is_active: bool


class PullRequestShort(BaseModel):
    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: str


class PullRequestResponse(BaseModel):
    pull_request_id: str
    pull_request_name: str
    author_id: str
    status: str
    assigned_reviewers: List[str]
    createdAt: Optional[datetime] = None
    mergedAt: Optional[datetime] = None


class PullRequestCreateRequest(BaseModel):
    pull_request_id: NonEmptyStr
    pull_request_name: NonEmptyStr
    author_id: NonEmptyStr


class PullRequestCreateResponse(BaseModel):
    pr: PullRequestResponse


class PullRequestMergeRequest(BaseModel):
    pull_request_id: NonEmptyStr


class PullRequestMergeResponse(BaseModel):
    pr: PullRequestResponse


class PullRequestReassignRequest(BaseModel):
    pull_request_id: NonEmptyStr
    old_user_id: NonEmptyStr


class PullRequestReassignResponse(BaseModel):
    pr: PullRequestResponse
    replaced_by: Optional[str] = None


class GetReviewResponse(BaseModel):
    user_id: str
    pull_requests: List[PullRequestShort]


class HealthResponse(BaseModel):
    status: str
