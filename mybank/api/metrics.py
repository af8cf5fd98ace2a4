"""Prometheus scrape endpoint."""

from fastapi import APIRouter, Depends
from fastapi.responses import Response

from mybank.api.dependencies import get_metrics
from mybank.core.metrics import MetricsRegistry

router = APIRouter()


@router.get("/metrics", include_in_schema=False)
async def read_metrics(metrics: MetricsRegistry = Depends(get_metrics)) -> Response:
    """Expose every registered metric in text exposition format."""
    return Response(
        content=metrics.snapshot(),
        media_type=metrics.content_type,
    )
