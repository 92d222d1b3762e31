"""HTTP route definitions for the exporter."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, Request, Response, status

from app.schemas import HealthResponse, SensorSnapshotItem
from services.poller import PollerService, build_default_poller


def get_poller() -> PollerService:
    return build_default_poller()


async def metrics(request: Request, poller: PollerService = Depends(get_poller)) -> Response:
    body, content_type = poller.metrics.negotiate(request.headers.get("accept"))
    return Response(content=body, media_type=content_type)


async def json_snapshot(
    poller: PollerService = Depends(get_poller),
) -> List[SensorSnapshotItem]:
    return [SensorSnapshotItem.from_reading(reading) for reading in poller.store.read()]


async def healthcheck(poller: PollerService = Depends(get_poller)) -> HealthResponse:
    return HealthResponse(devices=len(poller.store.device_ids))


def create_router(telemetry_path: str, json_path: str) -> APIRouter:
    """Build the exposition routes at the configured paths."""
    router = APIRouter()
    router.add_api_route(
        telemetry_path,
        metrics,
        methods=["GET"],
        summary="Prometheus text exposition of the temperature gauges.",
        response_class=Response,
    )
    router.add_api_route(
        json_path,
        json_snapshot,
        methods=["GET"],
        response_model=List[SensorSnapshotItem],
        summary="Latest reading of every discovered sensor.",
    )
    router.add_api_route(
        "/health",
        healthcheck,
        methods=["GET"],
        status_code=status.HTTP_200_OK,
        response_model=HealthResponse,
        summary="Health check endpoint.",
    )
    return router
