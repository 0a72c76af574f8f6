import uuid
from datetime import datetime, timedelta, UTC

from jose import JWTError, jwt
from passlib.context import CryptContext

from timekeeper.config import settings
from timekeeper.core.exceptions import UnauthorizedException

# scrypt: salted, memory-hard; passlib verifies in constant time
pwd_context = CryptContext(
    schemes=["scrypt"],
    deprecated="auto",
    scrypt__default_rounds=settings.PASSWORD_HASH_ROUNDS,
)


def hash_password(password: str) -> str:
    """Hash a plaintext password for storage"""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Check a plaintext password against a stored hash"""
    return pwd_context.verify(plain, hashed)


def create_access_token(
    user_id: int,
    tenant_id: int,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Issue a signed access token for a user within a tenant.

    Args:
        user_id: Internal user ID (stored in 'sub')
        tenant_id: Tenant the user belongs to (stored in 'tid')
        role: User role at issue time (informational, DB role is authoritative)
        expires_delta: Override of ACCESS_TOKEN_EXPIRE_HOURS

    Returns:
        Encoded JWT token
    """
    now = datetime.now(UTC)
    if expires_delta is None:
        expires_delta = timedelta(hours=settings.ACCESS_TOKEN_EXPIRE_HOURS)

    payload = {
        "sub": str(user_id),
        "tid": tenant_id,
        "role": role,
        "jti": uuid.uuid4().hex,
        "iat": now,
        "exp": now + expires_delta,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_jwt(token: str) -> dict:
    """
    Decode and validate JWT token using SECRET_KEY.

    Args:
        token: JWT access token from Authorization header

    Returns:
        Decoded token payload with 'sub', 'tid', 'jti', 'exp', etc.

    Raises:
        UnauthorizedException: If token invalid, expired, or malformed
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        raise UnauthorizedException(f"Invalid token: {str(e)}")

    # Validate expiration (jose checks the value automatically)
    if payload.get("exp") is None:
        raise UnauthorizedException("Token missing expiration")

    if payload.get("sub") is None:
        raise UnauthorizedException("Token missing user identifier")

    if payload.get("tid") is None:
        raise UnauthorizedException("Token missing tenant identifier")

    if payload.get("jti") is None:
        raise UnauthorizedException("Token missing token identifier")

    try:
        payload["sub"] = int(payload["sub"])
        payload["tid"] = int(payload["tid"])
    except (TypeError, ValueError):
        raise UnauthorizedException("Token identifiers are malformed")

    return payload


def token_expiry(payload: dict) -> datetime:
    """Expiry of a decoded token as an aware datetime"""
    return datetime.fromtimestamp(payload["exp"], tz=UTC)
