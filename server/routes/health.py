"""Service metadata endpoint, always free."""

from fastapi import APIRouter, Depends

from config.config import Settings
from server.dependencies import get_settings
from server.schemas.responses import EndpointDTO, ServiceInfoDTO

router = APIRouter(tags=["Health"])


@router.get("/", response_model=ServiceInfoDTO, response_model_exclude_none=True)
async def service_info(settings: Settings = Depends(get_settings)):
    """Service name, version, mode and the endpoint price table."""
    paid = settings.payment.enabled
    return ServiceInfoDTO(
        service=settings.service_name,
        version=settings.version,
        mode=settings.mode,
        network=settings.payment.network if paid else None,
        endpoints={
            route.path: EndpointDTO(
                price=route.price if paid else "free",
                description=route.description,
            )
            for route in settings.route_prices
        },
    )
