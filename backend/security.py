"""
Security utilities - JWT session verification for the external identity provider
"""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Header, HTTPException, status
from jose import JWTError, jwt

from config import get_settings

ACCESS_TOKEN_EXPIRE_DAYS = 30


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a signed session token.

    The identity provider issues these in production; the helper exists so
    local tooling and tests can mint sessions with the shared secret.

    Args:
        data: Claims to encode ("sub" must hold the external identity id)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    settings = get_settings()
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(days=ACCESS_TOKEN_EXPIRE_DAYS)

    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.auth_jwt_secret, algorithm=settings.auth_jwt_algorithm)


def get_current_user(authorization: Optional[str] = Header(None)) -> dict:
    """
    Validate the bearer token and return the caller's external identity.

    Use as FastAPI dependency to protect endpoints:
        @app.get("/protected")
        def protected_route(current_user: dict = Depends(get_current_user)):
            return {"external_id": current_user["external_id"]}

    Returns:
        Dict with external_id, email and name claims

    Raises:
        HTTPException 401: If the header is missing, malformed, or the token is invalid/expired
    """
    settings = get_settings()

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired session",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not authorization:
        raise credentials_exception

    # Extract token from "Bearer <token>"
    try:
        scheme, token = authorization.split()
    except ValueError:
        raise credentials_exception
    if scheme.lower() != "bearer":
        raise credentials_exception

    try:
        payload = jwt.decode(token, settings.auth_jwt_secret, algorithms=[settings.auth_jwt_algorithm])
    except JWTError:
        raise credentials_exception

    external_id: Optional[str] = payload.get("sub")
    if external_id is None:
        raise credentials_exception

    return {
        "external_id": external_id,
        "email": payload.get("email") or "",
        "name": payload.get("name"),
    }
