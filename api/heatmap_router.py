"""
Heatmap and day drill-down endpoints.

Both reads respect client disconnect and the configured read deadline.
"""

import logging

from fastapi import APIRouter, Depends, Query, Request

from api.context import get_request_context, get_services, run_cancellable
from api.response_models import DayDetailResponse, HeatmapResponse
from loadcal.app_services import Services
from loadcal.capacity import group_by_month, heatmap_color
from loadcal.context import RequestContext
from loadcal.dates import parse_date

logger = logging.getLogger(__name__)

heatmap_router = APIRouter(tags=["Heatmap"])


@heatmap_router.get("/heatmap/{entity_id}", response_model=HeatmapResponse, response_model_exclude_none=True)
async def get_heatmap(
    entity_id: str,
    request: Request,
    by_month: bool = Query(False, description="Also return days grouped by calendar month"),
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    GET /api/heatmap/:entity

    One day per calendar day from a month ago to six months ahead.
    """
    data = await run_cancellable(request, ctx, services.heatmap.build, entity_id)
    result = data.to_dict()
    if by_month:
        result["months"] = [m.to_dict() for m in group_by_month(data.days)]
    return result


@heatmap_router.get("/heatmap/{entity_id}/day/{day}", response_model=DayDetailResponse)
async def get_day_details(
    entity_id: str,
    day: str,
    request: Request,
    services: Services = Depends(get_services),
    ctx: RequestContext = Depends(get_request_context),
):
    """GET /api/heatmap/:entity/day/:date - loads behind one heatmap cell."""
    target = parse_date(day)
    details = await run_cancellable(request, ctx, services.day_detail.day_details, entity_id, target)
    color = heatmap_color(details.total_load, details.capacity)
    return {**details.to_dict(), "color": str(color), "color_hex": color.hex}
