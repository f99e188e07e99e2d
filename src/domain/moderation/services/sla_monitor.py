# File: src/domain/moderation/services/sla_monitor.py
"""
Background sweep over open reports.

Each cycle flags reports whose deadline has passed and sends one batched
email per urgency tier for reports close to their deadline. Alerted
reports are remembered in an AlertStore so the same report is not mailed
twice for the same tier; entries are dropped once the report is closed.
"""
import asyncio
from datetime import datetime, timedelta
from typing import Optional, Dict, Any, List

import sentry_sdk
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.config.settings import settings
from common.logging.logger import log_info, log_error, log_warning
from common.utils.date_utils import utc_now, ensure_utc
from domain.moderation.services.alert_store import AlertStore, MemoryAlertStore
from domain.reports.services.report_service import ReportService
from infrastructure.external.email.email_client import EmailClient, email_client as default_email_client

URGENT = "urgent"
WARNING = "warning"


def alert_key(tier: str, report_id: str) -> str:
    return f"{tier}-{report_id}"


def report_id_from_key(key: str) -> str:
    return key.split("-", 1)[1]


def format_time_remaining(deadline: datetime, now: Optional[datetime] = None) -> str:
    now = now or utc_now()
    remaining = (ensure_utc(deadline) - now).total_seconds()
    if remaining <= 0:
        return "OVERDUE"
    hours = int(remaining // 3600)
    minutes = int((remaining % 3600) // 60)
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def build_alert_subject(count: int, urgent: bool) -> str:
    if urgent:
        return f"[URGENT] {settings.APP_NAME}: {count} report(s) about to breach SLA"
    return f"[Warning] {settings.APP_NAME}: {count} report(s) approaching SLA deadline"


def build_alert_email(reports: List[Dict[str, Any]], urgent: bool, now: Optional[datetime] = None,
                      pending_total: Optional[int] = None) -> str:
    cell = 'style="padding:8px;border:1px solid #ddd"'
    head = 'style="padding:8px;border:1px solid #ddd;text-align:left"'
    rows = "".join(
        f"""
      <tr>
        <td {cell}>{r["_id"]}</td>
        <td {cell}>{r["reason"]}</td>
        <td {cell}>{r["target_type"]}</td>
        <td {cell}>{format_time_remaining(r["sla_deadline"], now)}</td>
        <td {cell}>{ensure_utc(r["created_at"]).strftime("%Y-%m-%d %H:%M UTC")}</td>
      </tr>"""
        for r in reports
    )
    banner = "#dc3545" if urgent else "#ffc107"
    banner_text = "#fff" if urgent else "#000"
    label = "URGENT: " if urgent else ""
    verb = "about to breach" if urgent else "approaching"
    backlog = (
        f"\n      <p>{pending_total} report(s) pending review in total.</p>" if pending_total is not None else ""
    )

    return f"""<!doctype html>
<html>
<head><meta charset="utf-8"/></head>
<body style="font-family:Arial,sans-serif;margin:0;padding:20px;background:#f7f7f7">
  <div style="max-width:700px;margin:0 auto;background:#fff;border:1px solid #ddd;border-radius:8px;overflow:hidden">
    <div style="background:{banner};padding:16px;color:{banner_text}">
      <h2 style="margin:0">{label}SLA Alert - Reports Requiring Attention</h2>
    </div>
    <div style="padding:20px">
      <p>The following reports are {verb} the {settings.REPORT_SLA_HOURS}-hour SLA deadline:</p>
      <table style="width:100%;border-collapse:collapse;margin:16px 0">
        <thead>
          <tr style="background:#f5f5f5">
            <th {head}>Report ID</th>
            <th {head}>Reason</th>
            <th {head}>Type</th>
            <th {head}>Time Remaining</th>
            <th {head}>Submitted</th>
          </tr>
        </thead>
        <tbody>{rows}
        </tbody>
      </table>{backlog}
      <p style="margin-top:20px">
        <a href="{settings.ADMIN_PANEL_URL}/reports"
           style="display:inline-block;padding:12px 24px;background:#1a73e8;color:#fff;text-decoration:none;border-radius:6px">
          View Reports Dashboard
        </a>
      </p>
      <p style="color:#666;font-size:12px;margin-top:24px">
        App store guidelines require that user reports be addressed within {settings.REPORT_SLA_HOURS} hours.
      </p>
    </div>
  </div>
</body>
</html>"""


class SLAMonitor:
    def __init__(
        self,
        db: AsyncIOMotorDatabase,
        alert_store: AlertStore = None,
        email_client: EmailClient = None,
        interval_minutes: int = None
    ):
        self.report_service = ReportService(db)
        self.alert_store = alert_store or MemoryAlertStore()
        self.email_client = email_client or default_email_client
        self.interval_minutes = interval_minutes or settings.SLA_MONITOR_INTERVAL_MINUTES
        self._task: Optional[asyncio.Task] = None

    async def _alert_tier(self, tier: str, reports: List[Dict[str, Any]], alerted: set, now: datetime) -> int:
        fresh = [r for r in reports if alert_key(tier, r["_id"]) not in alerted]
        if not fresh:
            return 0

        urgent = tier == URGENT
        pending_total = await self.report_service.pending_count()
        try:
            await asyncio.wait_for(
                self.email_client.send(
                    settings.ADMIN_ALERT_EMAIL,
                    build_alert_subject(len(fresh), urgent),
                    build_alert_email(fresh, urgent, now, pending_total),
                ),
                timeout=settings.SLA_ALERT_EMAIL_TIMEOUT_SECONDS,
            )
        except Exception as e:
            # keys stay unmarked so the next cycle retries
            log_error("SLA alert email failed", extra={"tier": tier, "reports": len(fresh), "error": str(e)})
            sentry_sdk.capture_exception(e)
            return 0

        await self.alert_store.add(alert_key(tier, r["_id"]) for r in fresh)
        log_info("SLA alert sent", extra={"tier": tier, "reports": len(fresh)})
        return len(fresh)

    async def _reconcile(self) -> int:
        keys = await self.alert_store.members()
        if not keys:
            return 0
        report_ids = sorted({report_id_from_key(k) for k in keys})
        closed = set(await self.report_service.reports.find_closed_ids(report_ids))
        stale = [k for k in keys if report_id_from_key(k) in closed]
        await self.alert_store.discard(stale)
        return len(stale)

    async def run_cycle(self, now: Optional[datetime] = None) -> Dict[str, int]:
        now = now or utc_now()
        urgent_until = now + timedelta(hours=settings.SLA_URGENT_WINDOW_HOURS)

        at_risk = await self.report_service.at_risk(settings.SLA_WARNING_WINDOW_HOURS, now)
        breached_marked = await self.report_service.mark_breached(now)

        urgent = [r for r in at_risk if ensure_utc(r["sla_deadline"]) <= urgent_until]
        warning = [r for r in at_risk if ensure_utc(r["sla_deadline"]) > urgent_until]

        alerted = await self.alert_store.members()
        alerts_sent = await self._alert_tier(URGENT, urgent, alerted, now)
        alerts_sent += await self._alert_tier(WARNING, warning, alerted, now)

        reconciled = await self._reconcile()

        summary = {
            "at_risk": len(at_risk),
            "urgent": len(urgent),
            "warning": len(warning),
            "alerts_sent": alerts_sent,
            "breached_marked": breached_marked,
        }
        log_info("SLA monitor cycle complete", extra={**summary, "reconciled": reconciled})
        return summary

    async def _safe_cycle(self) -> Optional[Dict[str, int]]:
        try:
            return await self.run_cycle()
        except Exception as e:
            log_error("SLA monitor cycle failed", extra={"error": str(e)}, exc_info=True)
            sentry_sdk.capture_exception(e)
            return None

    async def _run_forever(self):
        while True:
            await self._safe_cycle()
            await asyncio.sleep(self.interval_minutes * 60)

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.running:
            log_warning("SLA monitor already running")
            return
        log_info("Starting SLA monitor", extra={"interval_minutes": self.interval_minutes})
        self._task = asyncio.create_task(self._run_forever())

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
        log_info("SLA monitor stopped")
