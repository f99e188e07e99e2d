# File: src/domain/images/services/image_listing_service.py
from typing import Optional, Dict, Any

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.base_service.base_service import BaseService
from common.exceptions.base_exception import ValidationException
from common.logging.logger import log_info
from common.translations.messages import get_message
from common.utils.date_utils import ensure_utc
from common.utils.pagination import clamp_pagination, paginate_response
from domain.blocks.services.block_service import BlockService
from domain.images.entities.image_entity import IMAGE_CATEGORIES
from infrastructure.database.mongodb.repositories.image_repository import ImageRepository


def image_to_public(doc: Dict[str, Any]) -> Dict[str, Any]:
    data = dict(doc)
    data["id"] = data.pop("_id")
    if data.get("created_at"):
        data["created_at"] = ensure_utc(data["created_at"])
    return data


class ImageListingService(BaseService):
    def __init__(self, db: AsyncIOMotorDatabase):
        super().__init__()
        self.images = ImageRepository(db)
        self.block_service = BlockService(db)

    async def list_images(
        self,
        viewer_id: Optional[str] = None,
        category: Optional[str] = None,
        page: Any = 1,
        limit: Any = 20,
        language: str = "en"
    ) -> Dict[str, Any]:
        """Newest listings first, without work from authors the viewer has blocked."""
        if category and category not in IMAGE_CATEGORIES:
            raise ValidationException(detail=get_message("image.invalid_category", language))

        page, limit, skip = clamp_pagination(page, limit, default_limit=20, max_limit=100)
        query: Dict[str, Any] = await self.block_service.exclusion_filter(viewer_id)
        if category:
            query["category"] = category

        docs = await self.images.list_listings(query, skip=skip, limit=limit)
        total = await self.images.count(query)

        log_info("Image listing served", extra={
            "viewer_id": viewer_id, "category": category, "excluded_authors": len(query.get("user_id", {}).get("$nin", [])),
            "count": len(docs),
        })
        return paginate_response([image_to_public(d) for d in docs], total, page, limit, items_key="images")
