"""Bearer token authentication.

Tokens are JWTs signed by the identity provider; ``sub`` holds the user's
``external_id``.
"""

from typing import Annotated, Any

import jwt
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from loguru import logger

from src.core.config import AuthConfig, Settings, get_settings
from src.core.context import RequestContext
from src.core.exceptions import NotFoundError, UnauthorizedError
from src.infrastructure.database.dependencies import DatabaseSession
from src.infrastructure.database.models import User
from src.infrastructure.repositories.user import UserRepository

bearer_scheme = HTTPBearer(auto_error=False)


def decode_subject(token: str, config: AuthConfig) -> str:
    """Verify a bearer token and return its subject.

    Raises:
        UnauthorizedError: If the token is expired, malformed, badly signed
            or has no subject.
    """
    options: dict[str, Any] = {
        "require": ["sub"],
        "verify_aud": config.token_audience is not None,
    }
    try:
        payload = jwt.decode(
            token,
            config.token_secret,
            algorithms=[config.token_algorithm],
            audience=config.token_audience,
            options=options,
        )
    except jwt.ExpiredSignatureError as e:
        raise UnauthorizedError("Token has expired", cause=e) from e
    except jwt.InvalidTokenError as e:
        raise UnauthorizedError("Invalid token", cause=e) from e

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise UnauthorizedError("Invalid token: missing subject")
    return subject


async def get_current_user(
    request: Request,
    db: DatabaseSession,
    settings: Annotated[Settings, Depends(get_settings)],
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> User:
    """Resolve the authenticated user from the Authorization header.

    Raises:
        UnauthorizedError: If no valid bearer token was sent.
        NotFoundError: If no user has the token's subject.
    """
    if credentials is None:
        raise UnauthorizedError("Not authenticated")

    subject = decode_subject(credentials.credentials, settings.auth_config)
    user = await UserRepository(db).find_by_external_id(subject)
    if user is None:
        logger.warning("Valid token for unknown subject")
        raise NotFoundError("User not found")

    RequestContext.set_user_id(user.id)
    request.state.user_id = user.id
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
