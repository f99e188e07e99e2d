# File: src/api/routers/reports/reports.py
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
from common.dependencies.service_dep import get_report_service
from domain.auth.entities.token_entity import CurrentUser
from domain.reports.entities.report_entity import DESCRIPTION_MAX_LENGTH
from domain.reports.services.report_service import ReportService, list_reasons

router = APIRouter(prefix="/reports", tags=["Reports"])


class SubmitReportRequest(BaseRequestModel):
    reason: str = Field(..., description="One of the values returned by /reports/reasons")
    description: Optional[str] = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH, description="Details for the moderators")


def log_endpoint_error(error: str | Exception, endpoint: str, client_ip: str, user_id: str, exc_info: bool = False):
    log_error(f"Handled error in {endpoint}", extra={
        "error": str(error),
        "endpoint": endpoint,
        "ip": client_ip,
        "user_id": user_id,
    }, exc_info=exc_info)


@router.post(
    "/image/{image_id}",
    status_code=status.HTTP_201_CREATED,
    response_model=StandardResponse,
    summary="Report an image",
    responses={400: {"description": "Invalid reason or id, or own content"},
               404: {"description": "Image not found"}, 409: {"description": "Already reported"}}
)
async def report_image(
    image_id: str,
    data: SubmitReportRequest,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[ReportService, Depends(get_report_service)]
):
    client_ip = await extract_client_ip(request)
    language = data.response_language
    try:
        result = await service.submit_image_report(
            reporter_id=current_user.user_id,
            image_id=image_id,
            reason=data.reason,
            description=data.description,
            language=language
        )
        log_info("Image report accepted", extra={
            "report_id": result["report_id"], "image_id": image_id, "ip": client_ip, "request_id": data.request_id
        })
        return StandardResponse.ok(
            data={"report_id": result["report_id"], "status": result["status"]},
            message=result["message"]
        )
    except HTTPException as http_exc:
        log_endpoint_error(http_exc.detail, "/reports/image", client_ip, current_user.user_id)
        raise
    except Exception as e:
        log_endpoint_error(e, "/reports/image", client_ip, current_user.user_id, exc_info=True)
        raise InternalServerErrorException(detail=get_message("server.error", language))


@router.post(
    "/user/{user_id}",
    status_code=status.HTTP_201_CREATED,
    response_model=StandardResponse,
    summary="Report a user",
    responses={400: {"description": "Invalid reason or id, or self report"},
               404: {"description": "User not found"}, 409: {"description": "Already reported"}}
)
async def report_user(
    user_id: str,
    data: SubmitReportRequest,
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[ReportService, Depends(get_report_service)]
):
    client_ip = await extract_client_ip(request)
    language = data.response_language
    try:
        result = await service.submit_user_report(
            reporter_id=current_user.user_id,
            user_id=user_id,
            reason=data.reason,
            description=data.description,
            language=language
        )
        log_info("User report accepted", extra={
            "report_id": result["report_id"], "target_user_id": user_id, "ip": client_ip, "request_id": data.request_id
        })
        return StandardResponse.ok(
            data={"report_id": result["report_id"], "status": result["status"]},
            message=result["message"]
        )
    except HTTPException as http_exc:
        log_endpoint_error(http_exc.detail, "/reports/user", client_ip, current_user.user_id)
        raise
    except Exception as e:
        log_endpoint_error(e, "/reports/user", client_ip, current_user.user_id, exc_info=True)
        raise InternalServerErrorException(detail=get_message("server.error", language))


@router.get("/my-reports", response_model=StandardResponse, summary="Reports submitted by the caller")
async def my_reports(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    service: Annotated[ReportService, Depends(get_report_service)],
    page: Annotated[str, Query(description="Page number, starting at 1")] = "1",
    limit: Annotated[str, Query(description="Page size, at most 50")] = "20",
    language: Annotated[Literal["en", "es"], Query(description="Response language (en/es)")] = "en"
):
    client_ip = await extract_client_ip(request)
    try:
        result = await service.list_for_reporter(current_user.user_id, page=page, limit=limit)
        return StandardResponse.ok(data=result)
    except HTTPException as http_exc:
        log_endpoint_error(http_exc.detail, "/reports/my-reports", client_ip, current_user.user_id)
        raise
    except Exception as e:
        log_endpoint_error(e, "/reports/my-reports", client_ip, current_user.user_id, exc_info=True)
        raise InternalServerErrorException(detail=get_message("server.error", language))


@router.get("/reasons", response_model=StandardResponse, summary="Valid report reasons")
async def report_reasons():
    return StandardResponse.ok(data=list_reasons())
