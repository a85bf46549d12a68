from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from fyp_repository.core.exceptions import UnauthorizedError
from fyp_repository.core.logging_config import set_admin_id
from fyp_repository.core.security import decode_access_token
from fyp_repository.schemas.admin import AdminIdentity

# auto_error=False so a missing header yields our 401 envelope, not FastAPI's 403
security = HTTPBearer(auto_error=False)


async def get_current_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> AdminIdentity:
    """
    Verify the bearer token and expose the decoded admin identity.

    Stateless: the token is trusted until it expires.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("No authorization token provided")

    payload = decode_access_token(credentials.credentials)

    admin_id = str(payload["sub"])
    set_admin_id(admin_id)

    return AdminIdentity(
        id=admin_id,
        email=payload.get("email", ""),
        role=payload.get("role", "admin"),
    )
