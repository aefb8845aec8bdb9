"""JWT authentication for Supabase-issued access tokens.

HR and admin users sign in through Supabase Auth in the browser and send the
resulting access token as a Bearer token. Tokens are HS256-signed with the
project's JWT secret. Accounts whose email contains "admin" get the admin
role; everyone else is HR.
"""

from typing import Annotated

import jwt
from fastapi import Depends, Header, HTTPException, status

from config.settings import settings

ROLE_ADMIN = "admin"
ROLE_HR = "hr"


def role_for_email(email: str) -> str:
    """Portal role for an account email."""
    return ROLE_ADMIN if "admin" in email.lower() else ROLE_HR


def validate_token(token: str) -> dict:
    """Validate a Supabase access token.

    Args:
        token: The JWT token string to validate.

    Returns:
        dict containing user_id, email, role, and decoded token.

    Raises:
        HTTPException: For various authentication failures.
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication Token is missing!",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        decoded_token = jwt.decode(
            token,
            settings.supabase_jwt_secret,
            algorithms=["HS256"],
            audience=settings.jwt_audience,
        )
    except jwt.ExpiredSignatureError as e:
        raise HTTPException(status_code=401, detail="Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise HTTPException(status_code=401, detail=f"Token validation failed: {str(e)}") from e

    user_id = decoded_token.get("sub")
    email = decoded_token.get("email")
    if not user_id or not email:
        raise HTTPException(status_code=401, detail="Invalid Token: subject or email missing")

    return {
        "user_id": user_id,
        "email": email,
        "role": role_for_email(email),
        "token": decoded_token,
    }


def token_required(
    authorization: Annotated[str | None, Header()] = None,
) -> dict:
    """FastAPI dependency for requiring valid authentication.

    Args:
        authorization: The Authorization header value.

    Returns:
        dict containing user_id, email, role, and decoded token.

    Raises:
        HTTPException: If authentication fails.
    """
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header missing or malformed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization.split(" ", 1)[1].strip()
    return validate_token(token)


def admin_required(
    auth_payload: Annotated[dict, Depends(token_required)],
) -> dict:
    """FastAPI dependency restricting an endpoint to admin accounts."""
    if auth_payload["role"] != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required",
        )
    return auth_payload
