from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from app.core.config import settings
from app.core.logger import logger

# Tokens come from the hosting platform's auth service; this module only verifies them
bearer_scheme = HTTPBearer(auto_error=False)


def _role_from_claims(payload: dict) -> str | None:
    app_metadata = payload.get("app_metadata") or {}
    return app_metadata.get("role") or payload.get("user_role") or payload.get("role")


async def require_admin(
        credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None or not settings.AUTH_JWT_SECRET:
        raise credentials_exception
    try:
        payload = jwt.decode(
            credentials.credentials,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            options={"verify_aud": False},
        )
    except JWTError as e:
        logger.warning(f"Rejected admin token: {str(e)}")
        raise credentials_exception

    if payload.get("sub") is None:
        raise credentials_exception

    if _role_from_claims(payload) not in settings.ADMIN_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return payload
