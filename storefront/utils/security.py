# storefront/utils/security.py
from datetime import datetime, timedelta, timezone

from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext

from storefront.domain.errors import AuthenticationError
from storefront.utils.settings import (
    ACCESS_TOKEN_TTL_DAYS,
    JWT_ALGORITHM,
    REFRESH_TOKEN_TTL_DAYS,
    SECRET_KEY,
    VERIFY_TOKEN_TTL_MINUTES,
)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

VERIFY = "verify"
ACCESS = "access"
REFRESH = "refresh"

_TTL = {
    VERIFY: timedelta(minutes=VERIFY_TOKEN_TTL_MINUTES),
    ACCESS: timedelta(days=ACCESS_TOKEN_TTL_DAYS),
    REFRESH: timedelta(days=REFRESH_TOKEN_TTL_DAYS),
}


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_token(user_id: int, purpose: str, expires_delta: timedelta | None = None,
                 session_key: str | None = None) -> str:
    expire = datetime.now(timezone.utc) + (expires_delta or _TTL[purpose])
    payload = {"id": str(user_id), "typ": purpose, "exp": expire}
    if session_key:
        # ties an access token to the login that issued it
        payload["sid"] = session_key
    return jwt.encode(payload, SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_claims(token: str, purpose: str, expired_status: int = 401) -> dict:
    """Return the claims of a token of the given purpose, with ``id`` as an int.

    Raises AuthenticationError when the token is expired, malformed, signed
    with another key or minted for a different purpose.
    """
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired", status_code=expired_status)
    except JWTError:
        raise AuthenticationError("Invalid token")

    if payload.get("typ") != purpose or not payload.get("id"):
        raise AuthenticationError("Invalid token")

    try:
        payload["id"] = int(payload["id"])
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token")
    return payload


def decode_token(token: str, purpose: str, expired_status: int = 401) -> int:
    return decode_claims(token, purpose, expired_status)["id"]


def bearer_token(authorization: str | None) -> str | None:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None
