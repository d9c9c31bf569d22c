"""JWT authentication."""

import jwt
from fastapi import HTTPException, Request, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from judge.config import Settings, get_settings

security = HTTPBearer()


def decode_user_id(token: str, settings: Settings) -> int:
    """Return the numeric user ID carried in the ``sub`` claim.

    Raises ``jwt.InvalidTokenError`` for bad tokens and ``ValueError`` when
    the subject is missing or not an integer.
    """
    payload = jwt.decode(
        token,
        settings.jwt_public_key or "secret",
        algorithms=[settings.jwt_algorithm],
        audience=settings.jwt_audience,
        issuer=settings.jwt_issuer,
    )
    subject = payload.get("sub")
    if subject is None:
        raise ValueError("missing user ID")
    return int(subject)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Security(security),
) -> int:
    """Extract and validate user ID from JWT token."""
    # Prefer user ID from middleware if available
    user_id = getattr(request.state, "user_id", None)
    if user_id is not None:
        return user_id

    try:
        settings = getattr(request.app.state, "settings", None) or get_settings()
        return decode_user_id(credentials.credentials, settings)
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.InvalidTokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token: {str(e)}",
        )
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID",
        )
