import logging
import random

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from models.database import get_session
from routes.errors import from_service_error, internal_error
from schemas import (
    PullRequestCreateRequest, PullRequestCreateResponse,
    PullRequestMergeRequest, PullRequestMergeResponse,
    PullRequestReassignRequest, PullRequestReassignResponse,
    ErrorResponse
)
from services import pull_request as pr_service
from services.errors import ServiceError
from services.picker import get_rng


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pullRequest")


@router.post("/create", status_code=status.HTTP_201_CREATED,
                summary="Create a PR and assign up to 2 reviewers from the author's team",
                response_model=PullRequestCreateResponse,
                responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
async def create(request: PullRequestCreateRequest,
                 session: AsyncSession = Depends(get_session),
                 rng: random.Random = Depends(get_rng)):
    try:
        pr = await pr_service.create_pull_request(
            session,
            request.pull_request_id,
            request.pull_request_name,
            request.author_id,
            rng=rng
        )
        return PullRequestCreateResponse(pr=pr)
    except ServiceError as e:
        raise from_service_error(e)
    except Exception:
        logger.exception("create PR %s failed", request.pull_request_id)
        raise internal_error()


@router.post("/merge", status_code=status.HTTP_200_OK,
                summary="Mark a PR as MERGED (idempotent)",
                response_model=PullRequestMergeResponse,
                responses={404: {"model": ErrorResponse}})
async def merge(request: PullRequestMergeRequest,
                session: AsyncSession = Depends(get_session)):
    try:
        pr = await pr_service.merge_pull_request(session, request.pull_request_id)
        return PullRequestMergeResponse(pr=pr)
    except ServiceError as e:
        raise from_service_error(e)
    except Exception:
        logger.exception("merge PR %s failed", request.pull_request_id)
        raise internal_error()


@router.post("/reassign", status_code=status.HTTP_200_OK,
                summary="Replace a reviewer with another member of the reviewer's team",
                response_model=PullRequestReassignResponse,
                responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}})
async def reassign(request: PullRequestReassignRequest,
                   session: AsyncSession = Depends(get_session),
                   rng: random.Random = Depends(get_rng)):
    try:
        result = await pr_service.reassign_reviewer(
            session,
            request.pull_request_id,
            request.old_user_id,
            rng=rng
        )
        return PullRequestReassignResponse(
            pr=result["pr"],
            replaced_by=result["replaced_by"]
        )
    except ServiceError as e:
        raise from_service_error(e)
    except Exception:
        logger.exception("reassign on PR %s failed", request.pull_request_id)
        raise internal_error()
