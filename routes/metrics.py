from fastapi import APIRouter, Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST


router = APIRouter()


@router.get("/metrics", summary="Prometheus metrics", include_in_schema=False)
async def get_metrics():
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
