import logging

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from models.database import get_session
from routes.errors import http_error, internal_error
from schemas import (
    SetIsActiveRequest, UserUpdateResponse, GetReviewResponse,
    ErrorResponse
)
from services import users as user_service
from services.users import ActivityUpdate


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users")


@router.post("/setIsActive", status_code=status.HTTP_200_OK,
                   summary="Set the user's active flag",
                   response_model=UserUpdateResponse,
                   responses={404: {"model": ErrorResponse}})
async def setIsActive(request: SetIsActiveRequest, session: AsyncSession = Depends(get_session)):
    try:
        outcome = await user_service.set_user_active(session, request.user_id, request.is_active)
        user = None
        if outcome is ActivityUpdate.UPDATED:
            user = await user_service.get_user(session, request.user_id)
    except Exception:
        logger.exception("setIsActive for %s failed", request.user_id)
        raise internal_error()

    if user is None:
        raise http_error(status.HTTP_404_NOT_FOUND, "NOT_FOUND", "user not found")
    return UserUpdateResponse(user=user)


@router.get("/getReview", status_code=status.HTTP_200_OK,
                  summary="PRs where the user is an assigned reviewer",
                  response_model=GetReviewResponse)
async def getReview(user_id: str = Query(..., min_length=1, description="User id"),
                    session: AsyncSession = Depends(get_session)):
    try:
        pull_requests = await user_service.get_review(session, user_id)
        return GetReviewResponse(
            user_id=user_id,
            pull_requests=pull_requests
        )
    except Exception:
        logger.exception("getReview for %s failed", user_id)
        raise internal_error()
