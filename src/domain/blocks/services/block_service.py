# File: src/domain/blocks/services/block_service.py
from typing import Optional, Dict, Any, List

from motor.motor_asyncio import AsyncIOMotorDatabase

from common.base_service.base_service import BaseService
from common.exceptions.base_exception import (
    ValidationException, NotFoundException, ConflictException, SelfActionException
)
from common.logging.logger import log_info
from common.translations.messages import get_message
from common.utils.date_utils import ensure_utc
from common.utils.pagination import clamp_pagination, paginate_response
from common.validators.validators import is_valid_object_id
from domain.blocks.entities.block_entity import Block, MutualBlockStatus
from infrastructure.database.mongodb.repositories.block_repository import BlockRepository
from infrastructure.database.mongodb.repositories.user_repository import UserRepository


class BlockService(BaseService):
    def __init__(self, db: AsyncIOMotorDatabase):
        super().__init__()
        self.blocks = BlockRepository(db)
        self.users = UserRepository(db)

    @staticmethod
    def _validate_user_id(user_id: str, language: str):
        if not is_valid_object_id(user_id):
            raise ValidationException(detail=get_message("block.invalid_user_id", language))

    async def block(self, blocker_id: str, target_id: str, reason: Optional[str] = None, language: str = "en") -> Dict[str, Any]:
        self._validate_user_id(target_id, language)
        if blocker_id == target_id:
            raise SelfActionException(detail=get_message("block.self", language))

        target = await self.users.get_summary(target_id)
        if not target:
            raise NotFoundException(detail=get_message("block.user_not_found", language))

        if await self.blocks.find_edge(blocker_id, target_id):
            raise ConflictException(detail=get_message("block.already", language), error_code="ALREADY_BLOCKED")

        block = Block(blocker_user_id=blocker_id, blocked_user_id=target_id, reason=reason or None)
        try:
            block_id = await self.blocks.insert(block.to_document())
        except ConflictException:
            # lost a race against a concurrent block of the same pair
            raise ConflictException(detail=get_message("block.already", language), error_code="ALREADY_BLOCKED")

        log_info("User blocked", extra={"blocker_id": blocker_id, "blocked_id": target_id, "block_id": block_id})
        return {
            "block_id": block_id,
            "blocked_user_id": target_id,
            "name": target.get("name") or "User",
        }

    async def unblock(self, blocker_id: str, target_id: str, language: str = "en") -> Dict[str, Any]:
        self._validate_user_id(target_id, language)
        deleted = await self.blocks.delete_edge(blocker_id, target_id)
        if not deleted:
            raise NotFoundException(detail=get_message("block.not_found", language))

        log_info("User unblocked", extra={"blocker_id": blocker_id, "blocked_id": target_id})
        return {"unblocked_user_id": target_id}

    async def is_blocked(self, blocker_id: str, target_id: str) -> bool:
        return await self.blocks.find_edge(blocker_id, target_id) is not None

    async def mutual_status(self, user_a: str, user_b: str) -> MutualBlockStatus:
        return MutualBlockStatus(
            a_blocked_b=await self.is_blocked(user_a, user_b),
            b_blocked_a=await self.is_blocked(user_b, user_a),
        )

    async def blocked_ids_of(self, user_id: str) -> List[str]:
        return await self.blocks.blocked_ids(user_id)

    async def exclusion_filter(self, viewer_id: Optional[str]) -> Dict[str, Any]:
        """Listing filter hiding authors the viewer has blocked; empty for anonymous viewers."""
        if not viewer_id:
            return {}
        blocked = await self.blocked_ids_of(viewer_id)
        if not blocked:
            return {}
        return {"user_id": {"$nin": blocked}}

    async def list_blocked(self, blocker_id: str, page: Any = 1, limit: Any = 50) -> Dict[str, Any]:
        page, limit, skip = clamp_pagination(page, limit, default_limit=50, max_limit=100)
        blocks = await self.blocks.list_for_blocker(blocker_id, skip=skip, limit=limit)
        total = await self.blocks.count_for_blocker(blocker_id)

        summaries = await self.users.get_summaries([b["blocked_user_id"] for b in blocks])
        blocked_users = []
        for block in blocks:
            user = summaries.get(block["blocked_user_id"])
            blocked_users.append({
                "block_id": block["_id"],
                "user_id": block["blocked_user_id"],
                "name": (user or {}).get("name") or "Unknown User",
                "profile_picture_link": (user or {}).get("profile_picture_link"),
                "blocked_at": ensure_utc(block.get("created_at")),
            })

        return paginate_response(blocked_users, total, page, limit, items_key="blocked_users")
