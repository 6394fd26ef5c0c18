import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from smarter_scheduler.api.deps import get_engine_config
from smarter_scheduler.core.config import EngineConfig
from smarter_scheduler.core.exceptions import SchedulerError
from smarter_scheduler.schemas.insights import (
    GenerateScheduleResponse,
    InsightsOut,
    MetricsOut,
    MetricsRequest,
    MetricsResponse,
    RecommendationOut,
)
from smarter_scheduler.schemas.schedule import ScheduleInputPayload, schedule_to_out
from smarter_scheduler.services.allocation import generate_schedule
from smarter_scheduler.services.metrics import (
    build_insights,
    build_occupancy_grid,
    build_recommendations,
    compute_metrics,
)

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "/generate-scheduler",
    response_model=GenerateScheduleResponse,
    responses={status.HTTP_400_BAD_REQUEST: {"description": "Schedule generation failed"}},
)
def generate_scheduler(
    payload: ScheduleInputPayload,
    config: EngineConfig = Depends(get_engine_config),
):
    request = payload.to_domain()
    outcome = generate_schedule(request, config)
    if not outcome.success:
        logger.warning("Rejected schedule input: %s", outcome.message)
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": outcome.message, "success": False},
        )

    grid = build_occupancy_grid(outcome.schedule, request, config)
    metrics = compute_metrics(grid)
    insights = build_insights(outcome, request, config, grid=grid)
    return GenerateScheduleResponse(
        message=outcome.message,
        success=True,
        schedule=schedule_to_out(outcome.schedule),
        conflicts=outcome.conflicts,
        metrics=MetricsOut.from_domain(metrics),
        insights=InsightsOut.from_domain(insights),
    )


@router.post("/scheduler/metrics", response_model=MetricsResponse)
def scheduler_metrics(
    payload: MetricsRequest,
    config: EngineConfig = Depends(get_engine_config),
) -> MetricsResponse:
    unknown_days = sorted(day for day in payload.schedule if day.strip().upper() not in config.days)
    if unknown_days:
        raise SchedulerError(
            f"Unknown schedule day(s): {', '.join(unknown_days)}",
            details={"days": unknown_days},
        )
    metrics = compute_metrics(payload.schedule)
    recommendations = build_recommendations(metrics.room_utilization, config)
    return MetricsResponse(
        metrics=MetricsOut.from_domain(metrics),
        recommendations=[RecommendationOut.from_domain(item) for item in recommendations],
    )
