"""Session introspection routes."""

from __future__ import annotations

from uuid import UUID

from dishka.integrations.fastapi import FromDishka, inject
from fastapi import APIRouter

from gateway_service_libs.logging_utils import create_service_logger
from services.session_gateway_service.models.identity import UserId

router = APIRouter()
logger = create_service_logger("session_gateway.session_routes")


@router.get("/session/user-id")
@inject
async def get_user_id(
    user_id: FromDishka[UserId],
    correlation_id: FromDishka[UUID],
) -> dict[str, str]:
    """Return the user identifier hint carried in the caller's token.

    The value is read without signature verification and is only meaningful
    because the session middleware already had the identity service accept
    the same token.
    """
    logger.info("User id hint requested", correlation_id=str(correlation_id))
    return {"user_id": user_id}
