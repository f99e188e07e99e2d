# File: src/common/dependencies/service_dep.py
from typing import Annotated

from fastapi import Request, Depends
from motor.motor_asyncio import AsyncIOMotorDatabase

from domain.blocks.services.block_service import BlockService
from domain.images.services.image_listing_service import ImageListingService
from domain.moderation.services.moderation_service import ModerationService
from domain.moderation.services.sla_monitor import SLAMonitor
from domain.reports.services.report_service import ReportService
from infrastructure.database.mongodb.connection import get_mongo_db

MongoDB = Annotated[AsyncIOMotorDatabase, Depends(get_mongo_db)]


async def get_block_service(db: MongoDB) -> BlockService:
    return BlockService(db)


async def get_report_service(db: MongoDB) -> ReportService:
    return ReportService(db)


async def get_moderation_service(db: MongoDB) -> ModerationService:
    return ModerationService(db)


async def get_image_listing_service(db: MongoDB) -> ImageListingService:
    return ImageListingService(db)


async def get_sla_monitor(request: Request, db: MongoDB) -> SLAMonitor:
    """The monitor started at boot, or a memory-backed one when the background task is disabled."""
    monitor = getattr(request.app.state, "sla_monitor", None)
    if monitor is None:
        monitor = SLAMonitor(db)
        request.app.state.sla_monitor = monitor
    return monitor
