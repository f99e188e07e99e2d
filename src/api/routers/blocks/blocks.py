# File: src/api/routers/blocks/blocks.py
from typing import Annotated, Literal, Optional

from fastapi import APIRouter, Request, status, Depends, HTTPException, Query
from pydantic import Field

from common.exceptions.base_exception import InternalServerErrorException
from common.logging.logger import log_info, log_error
from common.schemas.request_base import BaseRequestModel
from common.schemas.standard_response import StandardResponse
from common.security.auth import get_current_user
from common.translations.messages import get_message
from common.utils.ip_utils import extract_client_ip
from common.dependencies.service_dep import get_block_service
from domain.auth.entities.token_entity import CurrentUser
from domain.blocks.entities.block_entity import BLOCK_REASON_MAX_LENGTH
from domain.blocks.services.block_service import BlockService

router = APIRouter(prefix="/blocks", tags=["Blocks"])

Language = Annotated[Literal["en", "es"], Query(description="Response language (en/es)")]


class BlockUserRequest(BaseRequestModel):
    reason: Optional[str] = Field(default=None, max_length=BLOCK_REASON_MAX_LENGTH, description="Private note")


def log_endpoint_error(error: str | Exception, endpoint: str, client_ip: str, user_id: str, exc_info: bool = False):
    log_error(f"Handled error in {endpoint}", extra={
        "error": str(error),
        "endpoint": endpoint,
        "ip": client_ip,
        "user_id": user_id,
    }, exc_info=exc_info)


@router.get("/ids", response_model=StandardResponse, summary="Ids of users the caller blocked")
async def blocked_ids(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[BlockService, Depends(get_block_service)],
    language: Language = "en"
):
    try:
        return StandardResponse.ok(data=await service.blocked_ids_of(current_user.user_id))
    except HTTPException:
        raise
    except Exception as e:
        log_error("Unexpected error in /blocks/ids", extra={"user_id": current_user.user_id, "error": str(e)}, exc_info=True)
        raise InternalServerErrorException(detail=get_message("server.error", language))


@router.get("/check/{user_id}", response_model=StandardResponse, summary="Block status between the caller and a user")
async def check_block(
    user_id: str,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[BlockService, Depends(get_block_service)],
    language: Language = "en"
):
    client_ip = await extract_client_ip(request)
    try:
        BlockService._validate_user_id(user_id, language)
        block_status = await service.mutual_status(current_user.user_id, user_id)
        return StandardResponse.ok(data={
            "is_blocked": block_status.a_blocked_b,
            "is_blocked_by": block_status.b_blocked_a,
            "any_block": block_status.any_block,
        })
    except HTTPException as http_exc:
        log_endpoint_error(http_exc.detail, "/blocks/check", client_ip, current_user.user_id)
        raise
    except Exception as e:
        log_endpoint_error(e, "/blocks/check", client_ip, current_user.user_id, exc_info=True)
        raise InternalServerErrorException(detail=get_message("server.error", language))


@router.get("", response_model=StandardResponse, summary="Users the caller blocked")
async def list_blocked(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[BlockService, Depends(get_block_service)],
    page: Annotated[str, Query()] = "1",
    limit: Annotated[str, Query()] = "50",
    language: Language = "en"
):
    client_ip = await extract_client_ip(request)
    try:
        return StandardResponse.ok(data=await service.list_blocked(current_user.user_id, page=page, limit=limit))
    except HTTPException as http_exc:
        log_endpoint_error(http_exc.detail, "/blocks", client_ip, current_user.user_id)
        raise
    except Exception as e:
        log_endpoint_error(e, "/blocks", client_ip, current_user.user_id, exc_info=True)
        raise InternalServerErrorException(detail=get_message("server.error", language))


@router.post("/{user_id}", status_code=status.HTTP_201_CREATED, response_model=StandardResponse, summary="Block a user")
async def block_user(
    user_id: str,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[BlockService, Depends(get_block_service)],
    data: Optional[BlockUserRequest] = None
):
    data = data or BlockUserRequest()
    language = data.response_language
    client_ip = await extract_client_ip(request)
    try:
        result = await service.block(current_user.user_id, user_id, reason=data.reason, language=language)
        log_info("Block endpoint succeeded", extra={"blocker_id": current_user.user_id, "blocked_id": user_id, "ip": client_ip})
        return StandardResponse.ok(
            data={"block_id": result["block_id"], "blocked_user_id": result["blocked_user_id"]},
            message=get_message("block.created", language, {"name": result["name"]})
        )
    except HTTPException as http_exc:
        log_endpoint_error(http_exc.detail, "/blocks/{id}", client_ip, current_user.user_id)
        raise
    except Exception as e:
        log_endpoint_error(e, "/blocks/{id}", client_ip, current_user.user_id, exc_info=True)
        raise InternalServerErrorException(detail=get_message("server.error", language))


@router.delete("/{user_id}", response_model=StandardResponse, summary="Unblock a user")
async def unblock_user(
    user_id: str,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[BlockService, Depends(get_block_service)],
    language: Language = "en"
):
    client_ip = await extract_client_ip(request)
    try:
        result = await service.unblock(current_user.user_id, user_id, language=language)
        return StandardResponse.ok(data=result, message=get_message("block.removed", language))
    except HTTPException as http_exc:
        log_endpoint_error(http_exc.detail, "/blocks/{id}", client_ip, current_user.user_id)
        raise
    except Exception as e:
        log_endpoint_error(e, "/blocks/{id}", client_ip, current_user.user_id, exc_info=True)
        raise InternalServerErrorException(detail=get_message("server.error", language))
