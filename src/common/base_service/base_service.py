# File: src/common/base_service/base_service.py
from abc import ABC
from typing import Dict, Any, Callable, Awaitable

import sentry_sdk
from fastapi import HTTPException

from common.exceptions.base_exception import InternalServerErrorException
from common.logging.logger import log_info, log_error, log_warning
from common.translations.messages import get_message


class BaseService(ABC):
    def __init__(self):
        self.default_language = "en"

    async def execute(self, operation: Callable[[], Awaitable[Any]], context: Dict[str, Any], language: str = "en"):
        try:
            result = await operation()
            log_info(f"{context.get('action', 'Operation')} executed successfully", extra=context)
            return result
        except HTTPException as http_exc:
            log_warning(f"HTTP exception in {context.get('action', 'service')}",
                        extra={**context, "status_code": http_exc.status_code, "error": str(http_exc.detail)})
            if http_exc.status_code >= 500:
                sentry_sdk.capture_exception(http_exc)
            raise
        except Exception as e:
            log_error(f"Unexpected error in {context.get('action', 'service')}",
                      extra={**context, "error": str(e)}, exc_info=True)
            sentry_sdk.capture_exception(e)
            raise InternalServerErrorException(detail=get_message("server.error", language))
