from datetime import datetime, timedelta, UTC
from typing import Optional

from fastapi import Header, HTTPException
from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext
from tasktracker.config import SECRET_KEY, ALGORITHM

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str):
    """Hash a password after validating bcrypt's 72-byte limit.

    Raises ValueError if the UTF-8 encoding of the password exceeds 72 bytes.
    """
    if isinstance(password, str):
        b = password.encode("utf-8")
        if len(b) > 72:
            # make the failure explicit and consistent
            raise ValueError("password too long: must be at most 72 bytes when UTF-8 encoded")
    return pwd_context.hash(password)


def verify_password(plain, hashed):
    """Verify a plaintext password against a hash.

    If verification raises a ValueError (for example plain >72 bytes), return False
    to allow the caller to respond with an authentication failure instead of an error.
    """
    try:
        return pwd_context.verify(plain, hashed)
    except ValueError:
        return False

def create_token(user_id: int, email: Optional[str] = None):
    # read expiry at call-time so tests (and runtime overrides) that modify
    # tasktracker.config.ACCESS_TOKEN_EXPIRE_MINUTES take effect immediately
    import tasktracker.config as _cfg
    expire = datetime.now(UTC) + timedelta(minutes=_cfg.ACCESS_TOKEN_EXPIRE_MINUTES)
    data = {"sub": str(user_id), "exp": int(expire.timestamp())}  # JWT spec uses Unix timestamp
    if email:
        data["email"] = email
    return jwt.encode(data, SECRET_KEY, algorithm=ALGORITHM)


def _extract_token(authorization: Optional[str], token_query: Optional[str]) -> Optional[str]:
    """Return token from Authorization header (Bearer ...) or token query param (compat).
    Header has precedence.
    """
    if authorization:
        parts = authorization.split()
        if len(parts) == 2 and parts[0].lower() == "bearer":
            return parts[1]
    return token_query


def decode_user_id(tok: str) -> int:
    try:
        # jwt.decode validates exp automatically
        payload = jwt.decode(tok, SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token has expired")
    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid token")
    sub = payload.get("sub")
    if not sub or not str(sub).isdigit():
        raise HTTPException(status_code=401, detail="Invalid token: missing user")
    return int(sub)


def get_current_user_id(authorization: Optional[str] = Header(None), token: Optional[str] = None) -> int:
    """FastAPI dependency resolving the caller's user id from the request."""
    tok = _extract_token(authorization, token)
    if not tok:
        raise HTTPException(status_code=401, detail="Not authenticated")
    return decode_user_id(tok)
