# File: src/api/routers/admin/admin_reports.py
from typing import Annotated, Literal, Optional, Callable, Awaitable, Any

from fastapi import APIRouter, status, Depends, HTTPException, Query
from pydantic import Field

from common.exceptions.base_exception import InternalServerErrorException
from common.logging.logger import log_info, log_error
from common.schemas.request_base import BaseRequestModel
from common.schemas.standard_response import StandardResponse
from common.security.auth import require_admin
from common.translations.messages import get_message
from common.dependencies.service_dep import get_report_service, get_moderation_service, get_sla_monitor
from domain.auth.entities.token_entity import CurrentUser
from domain.moderation.services.moderation_service import ModerationService
from domain.moderation.services.sla_monitor import SLAMonitor
from domain.reports.services.report_service import ReportService

router = APIRouter(prefix="/admin/reports", tags=["Admin Reports"])

AdminUser = Annotated[CurrentUser, Depends(require_admin)]
Language = Annotated[Literal["en", "es"], Query(description="Response language (en/es)")]


class StatusUpdateRequest(BaseRequestModel):
    status: str = Field(..., description="pending, under_review, resolved or dismissed")


class WarnUserRequest(BaseRequestModel):
    message: Optional[str] = Field(default=None, description="Custom note shown to the user")


class SuspendUserRequest(BaseRequestModel):
    duration_days: Optional[int] = Field(default=None, description="Suspension length in days (1-365)")
    message: Optional[str] = Field(default=None, description="Custom note shown to the user")


class BanUserRequest(BaseRequestModel):
    reason: Optional[str] = Field(default=None, description="Required ban reason")


class RemoveContentRequest(BaseRequestModel):
    notify_user: bool = Field(default=True, description="Notify the content owner")
    reason: Optional[str] = Field(default=None, description="Custom removal note")


class DismissRequest(BaseRequestModel):
    reason: Optional[str] = Field(default=None, description="Why the report was dismissed")


async def run_admin_endpoint(endpoint: str, admin: CurrentUser, language: str, operation: Callable[[], Awaitable[Any]]):
    try:
        return await operation()
    except HTTPException as http_exc:
        log_error(f"Handled error in {endpoint}", extra={
            "endpoint": endpoint, "admin_id": admin.user_id, "error": str(http_exc.detail)
        })
        raise
    except Exception as e:
        log_error(f"Unexpected error in {endpoint}", extra={
            "endpoint": endpoint, "admin_id": admin.user_id, "error": str(e)
        }, exc_info=True)
        raise InternalServerErrorException(detail=get_message("server.error", language))


@router.get("", response_model=StandardResponse, summary="List reports")
async def list_reports(
    admin: AdminUser,
    service: Annotated[ReportService, Depends(get_report_service)],
    status_filter: Annotated[Optional[str], Query(alias="status")] = None,
    reason: Annotated[Optional[str], Query()] = None,
    sla_at_risk: Annotated[Optional[bool], Query()] = None,
    sort_by: Annotated[str, Query()] = "created_at",
    sort_order: Annotated[str, Query()] = "desc",
    page: Annotated[str, Query()] = "1",
    limit: Annotated[str, Query()] = "20",
    language: Language = "en"
):
    async def operation():
        result = await service.list_for_admin(
            status=status_filter,
            reason=reason,
            sla_at_risk=sla_at_risk,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            limit=limit,
        )
        return StandardResponse.ok(data=result)

    return await run_admin_endpoint("/admin/reports", admin, language, operation)


@router.get("/stats", response_model=StandardResponse, summary="Report dashboard statistics")
async def report_stats(
    admin: AdminUser,
    service: Annotated[ReportService, Depends(get_report_service)],
    language: Language = "en"
):
    async def operation():
        return StandardResponse.ok(data=await service.stats())

    return await run_admin_endpoint("/admin/reports/stats", admin, language, operation)


@router.post("/sla/check", response_model=StandardResponse, summary="Run one SLA monitor cycle now")
async def run_sla_check(
    admin: AdminUser,
    monitor: Annotated[SLAMonitor, Depends(get_sla_monitor)],
    language: Language = "en"
):
    async def operation():
        summary = await monitor.run_cycle()
        log_info("SLA check triggered manually", extra={"admin_id": admin.user_id, **summary})
        return StandardResponse.ok(data=summary, message=get_message("moderation.sla_checked", language))

    return await run_admin_endpoint("/admin/reports/sla/check", admin, language, operation)


@router.get("/{report_id}", response_model=StandardResponse, summary="Report details")
async def report_detail(
    report_id: str,
    admin: AdminUser,
    service: Annotated[ReportService, Depends(get_report_service)],
    language: Language = "en"
):
    async def operation():
        return StandardResponse.ok(data=await service.get_detail(report_id, language))

    return await run_admin_endpoint("/admin/reports/{id}", admin, language, operation)


@router.patch("/{report_id}/status", response_model=StandardResponse, summary="Change report status")
async def update_report_status(
    report_id: str,
    data: StatusUpdateRequest,
    admin: AdminUser,
    service: Annotated[ReportService, Depends(get_report_service)]
):
    language = data.response_language

    async def operation():
        report = await service.set_status(report_id, data.status, admin.user_id, language)
        return StandardResponse.ok(
            data=report,
            message=get_message("report.status_updated", language, {"status": report["status"]})
        )

    return await run_admin_endpoint("/admin/reports/{id}/status", admin, language, operation)


def _action_response(result: dict) -> StandardResponse:
    return StandardResponse.ok(data=result["data"], message=result["message"])


@router.post("/{report_id}/action/warn-user", response_model=StandardResponse, summary="Warn the reported user")
async def warn_user(
    report_id: str,
    admin: AdminUser,
    service: Annotated[ModerationService, Depends(get_moderation_service)],
    data: Optional[WarnUserRequest] = None
):
    data = data or WarnUserRequest()
    language = data.response_language

    async def operation():
        return _action_response(await service.warn_user(report_id, admin.user_id, data.message, language))

    return await run_admin_endpoint("/admin/reports/{id}/action/warn-user", admin, language, operation)


@router.post("/{report_id}/action/suspend-user", response_model=StandardResponse, summary="Suspend the reported user")
async def suspend_user(
    report_id: str,
    admin: AdminUser,
    service: Annotated[ModerationService, Depends(get_moderation_service)],
    data: Optional[SuspendUserRequest] = None
):
    data = data or SuspendUserRequest()
    language = data.response_language

    async def operation():
        return _action_response(await service.suspend_user(
            report_id, admin.user_id, duration_days=data.duration_days, message=data.message, language=language
        ))

    return await run_admin_endpoint("/admin/reports/{id}/action/suspend-user", admin, language, operation)


@router.post("/{report_id}/action/ban-user", response_model=StandardResponse, summary="Ban the reported user")
async def ban_user(
    report_id: str,
    admin: AdminUser,
    service: Annotated[ModerationService, Depends(get_moderation_service)],
    data: Optional[BanUserRequest] = None
):
    data = data or BanUserRequest()
    language = data.response_language

    async def operation():
        return _action_response(await service.ban_user(report_id, admin.user_id, data.reason, language))

    return await run_admin_endpoint("/admin/reports/{id}/action/ban-user", admin, language, operation)


@router.post("/{report_id}/action/remove-content", response_model=StandardResponse, summary="Remove the reported image")
async def remove_content(
    report_id: str,
    admin: AdminUser,
    service: Annotated[ModerationService, Depends(get_moderation_service)],
    data: Optional[RemoveContentRequest] = None
):
    data = data or RemoveContentRequest()
    language = data.response_language

    async def operation():
        return _action_response(await service.remove_content(
            report_id, admin.user_id, notify_target=data.notify_user, reason=data.reason, language=language
        ))

    return await run_admin_endpoint("/admin/reports/{id}/action/remove-content", admin, language, operation)


@router.post(
    "/{report_id}/action/dismiss",
    status_code=status.HTTP_200_OK,
    response_model=StandardResponse,
    summary="Dismiss the report"
)
async def dismiss_report(
    report_id: str,
    admin: AdminUser,
    service: Annotated[ModerationService, Depends(get_moderation_service)],
    data: Optional[DismissRequest] = None
):
    data = data or DismissRequest()
    language = data.response_language

    async def operation():
        return _action_response(await service.dismiss(report_id, admin.user_id, data.reason, language))

    return await run_admin_endpoint("/admin/reports/{id}/action/dismiss", admin, language, operation)
