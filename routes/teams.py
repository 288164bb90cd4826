import logging

from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from models.database import get_session
from routes.errors import from_service_error, internal_error
from schemas import (
    TeamRequest, TeamCreateResponse, TeamResponse,
    ErrorResponse
)
from services import teams as team_service
from services.errors import ServiceError


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/team")


@router.post("/add", status_code=status.HTTP_201_CREATED,
                  summary="Create or extend a team (creates/updates users)",
                  response_model=TeamCreateResponse,
                  responses={400: {"model": ErrorResponse}})
async def add(request: TeamRequest, session: AsyncSession = Depends(get_session)):
    try:
        await team_service.upsert_team(session, request.team_name, request.members)
        team = await team_service.get_team(session, request.team_name)
        return TeamCreateResponse(team=team)
    except ServiceError as e:
        raise from_service_error(e)
    except Exception:
        logger.exception("upsert of team %s failed", request.team_name)
        raise internal_error()


@router.get("/get", status_code=status.HTTP_200_OK,
                 summary="Get a team with its members",
                 response_model=TeamResponse,
                 responses={404: {"model": ErrorResponse}})
async def get(team_name: str = Query(..., min_length=1, description="Unique team name"),
              session: AsyncSession = Depends(get_session)):
    try:
        team = await team_service.get_team(session, team_name)
        return TeamResponse(**team)
    except ServiceError as e:
        raise from_service_error(e)
    except Exception:
        logger.exception("get team %s failed", team_name)
        raise internal_error()
