import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from models.database import get_session
from routes.errors import http_error
from schemas import HealthResponse, ErrorResponse


logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", status_code=status.HTTP_200_OK,
            summary="Database connectivity check",
            response_model=HealthResponse,
            responses={503: {"model": ErrorResponse}})
async def health(session: AsyncSession = Depends(get_session)):
    try:
        result = await session.execute(text("SELECT 1"))
        ok = result.scalar() == 1
    except Exception:
        logger.exception("health check failed")
        ok = False

    if not ok:
        raise http_error(status.HTTP_503_SERVICE_UNAVAILABLE, "UNAVAILABLE", "database is unavailable")
    return HealthResponse(status="ok")
