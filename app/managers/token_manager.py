"""Token manager for issuing and verifying JWT access tokens."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

from jose import JWTError, jwt

from app.configs import settings
from app.schemas.auth import TokenData


def is_owner_email(email: str) -> bool:
    """Whether ``email`` belongs to the site owner."""
    return bool(settings.OWNER_EMAIL) and email.lower() == settings.OWNER_EMAIL.lower()


def create_access_token(
    user_id: int,
    email: str,
    name: str,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a new access token.

    Args:
        user_id: User's id, stored as the ``sub`` claim
        email: User's email
        name: User's display name
        expires_delta: Optional expiration time delta

    Returns:
        str: Encoded JWT access token
    """
    now = datetime.now(UTC)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode = {
        "sub": str(user_id),
        "email": email,
        "name": name,
        "is_owner": is_owner_email(email),
        "jti": str(uuid4()),
        "iat": now,
        "exp": expire,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
        "type": "access",
    }

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> TokenData | None:
    """
    Decode and validate an access token.

    Args:
        token: JWT token string

    Returns:
        TokenData | None: Decoded token data or None if invalid or expired
    """
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
    except JWTError:
        return None

    subject: str | None = payload.get("sub")
    email: str | None = payload.get("email")
    if not subject or not subject.isdigit() or not email or payload.get("type") != "access":
        return None

    return TokenData(
        user_id=int(subject),
        email=email,
        name=payload.get("name", ""),
        is_owner=bool(payload.get("is_owner", False)),
        jti=payload.get("jti"),
    )
