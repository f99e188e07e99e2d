# infrastructure/setup/initial_setup.py
from motor.motor_asyncio import AsyncIOMotorDatabase

from common.logging.logger import log_info
from infrastructure.database.mongodb.repositories.block_repository import BlockRepository
from infrastructure.database.mongodb.repositories.image_repository import ImageRepository
from infrastructure.database.mongodb.repositories.notification_repository import NotificationRepository
from infrastructure.database.mongodb.repositories.report_repository import ReportRepository


async def ensure_indexes(db: AsyncIOMotorDatabase):
    """Create the indexes the moderation and listing queries rely on. Safe to run on every start."""
    await ReportRepository(db).ensure_indexes()
    await BlockRepository(db).ensure_indexes()
    await ImageRepository(db).ensure_indexes()
    await NotificationRepository(db).ensure_indexes()
    log_info("Database indexes ensured")
