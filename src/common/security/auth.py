# File: common/security/auth.py
from typing import Optional

from fastapi import Request, Depends
from jose import jwt, ExpiredSignatureError, JWTError
from pydantic import ValidationError

from common.config.settings import settings
from common.exceptions.base_exception import UnauthorizedException, ForbiddenException
from common.logging.logger import log_info, log_warning
from common.translations.messages import get_message
from domain.auth.entities.token_entity import TokenPayload, CurrentUser


def get_token_from_header(request: Request) -> Optional[str]:
    """Return the Bearer token from the Authorization header, or None when absent."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header.split(" ", 1)[1].strip()
    return token or None


def decode_access_token(token: str) -> TokenPayload:
    try:
        payload = jwt.decode(
            token,
            settings.ACCESS_SECRET,
            algorithms=[settings.ALGORITHM],
            audience=settings.ACCESS_AUDIENCE,
        )
        return TokenPayload(**payload)
    except ExpiredSignatureError:
        log_warning("Access token expired")
        raise UnauthorizedException(detail=get_message("auth.invalid_token"))
    except JWTError as e:
        log_warning("Invalid access token", extra={"error": str(e)})
        raise UnauthorizedException(detail=get_message("auth.invalid_token"))
    except ValidationError as e:
        log_warning("Invalid access token payload", extra={"errors": str(e)})
        raise UnauthorizedException(detail=get_message("auth.invalid_token"))


async def get_current_user(request: Request) -> CurrentUser:
    token = get_token_from_header(request)
    if not token:
        raise UnauthorizedException(detail=get_message("auth.missing_token"))

    token_data = decode_access_token(token)
    log_info("User authorized", extra={"user_id": token_data.sub, "role": token_data.role})
    return CurrentUser(user_id=token_data.sub, role=token_data.role)


async def get_optional_user(request: Request) -> Optional[CurrentUser]:
    """Anonymous requests get None; a present but invalid token is still rejected."""
    token = get_token_from_header(request)
    if not token:
        return None
    token_data = decode_access_token(token)
    return CurrentUser(user_id=token_data.sub, role=token_data.role)


async def require_admin(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    if not current_user.is_admin:
        log_warning("Non-admin attempted admin route", extra={"user_id": current_user.user_id})
        raise ForbiddenException(detail=get_message("auth.forbidden"))
    return current_user
