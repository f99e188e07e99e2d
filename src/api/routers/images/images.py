# File: src/api/routers/images/images.py
from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Request, Depends, HTTPException, Query

from common.exceptions.base_exception import InternalServerErrorException
from common.logging.logger import log_error
from common.schemas.standard_response import StandardResponse
from common.security.auth import get_optional_user
from common.translations.messages import get_message
from common.utils.ip_utils import extract_client_ip
from common.dependencies.service_dep import get_image_listing_service
from domain.auth.entities.token_entity import CurrentUser
from domain.images.services.image_listing_service import ImageListingService

router = APIRouter(prefix="/images", tags=["Images"])


@router.get("", response_model=StandardResponse, summary="Browse image listings")
async def list_images(
    request: Request,
    viewer: Annotated[Optional[CurrentUser], Depends(get_optional_user)],
    service: Annotated[ImageListingService, Depends(get_image_listing_service)],
    category: Annotated[Optional[str], Query()] = None,
    page: Annotated[str, Query()] = "1",
    limit: Annotated[str, Query()] = "20",
    language: Annotated[Literal["en", "es"], Query(description="Response language (en/es)")] = "en"
):
    client_ip = await extract_client_ip(request)
    viewer_id = viewer.user_id if viewer else None
    try:
        result = await service.list_images(viewer_id, category=category, page=page, limit=limit, language=language)
        return StandardResponse.ok(data=result)
    except HTTPException as http_exc:
        log_error("Handled error in /images", extra={"error": str(http_exc.detail), "ip": client_ip, "viewer_id": viewer_id})
        raise
    except Exception as e:
        log_error("Unexpected error in /images", extra={"error": str(e), "ip": client_ip, "viewer_id": viewer_id}, exc_info=True)
        raise InternalServerErrorException(detail=get_message("server.error", language))
