"""Entity capacity endpoints: default capacity and per-date overrides."""

from fastapi import APIRouter, Depends

from api.auth import require_api_key
from api.context import get_services
from api.request_models import UpdateCapacityRequest
from api.response_models import CapacityInfoResponse, MutationResponse
from loadcal.app_services import Services
from loadcal.dates import parse_date

capacity_router = APIRouter(tags=["Capacity"])


@capacity_router.get("/entities/{entity_id}/capacity", response_model=CapacityInfoResponse)
def get_capacity(entity_id: str, services: Services = Depends(get_services)):
    """Default capacity plus overrides for the next 90 days."""
    return services.capacity_service.capacity_info(entity_id).to_dict()


@capacity_router.put(
    "/entities/{entity_id}/capacity", response_model=CapacityInfoResponse, dependencies=[Depends(require_api_key)]
)
def update_capacity(entity_id: str, body: UpdateCapacityRequest, services: Services = Depends(get_services)):
    services.capacity_service.update_capacity(
        entity_id,
        default_capacity=body.default_capacity,
        date_overrides=[(o.date, o.capacity) for o in body.date_overrides],
    )
    return services.capacity_service.capacity_info(entity_id).to_dict()


@capacity_router.delete(
    "/entities/{entity_id}/capacity/overrides/{day}",
    response_model=MutationResponse,
    dependencies=[Depends(require_api_key)],
)
def delete_override(entity_id: str, day: str, services: Services = Depends(get_services)):
    services.capacity_service.delete_date_override(entity_id, parse_date(day))
    return {"success": True}
