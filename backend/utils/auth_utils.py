import logging
import os
from typing import Dict, Any, Optional

from dotenv import load_dotenv
from fastapi import Depends, HTTPException, status, Request
from jose import jwt
from jose.exceptions import JWTError, ExpiredSignatureError, JWTClaimsError

load_dotenv()

logger = logging.getLogger(__name__)

# === Token Configuration ===
# The identity provider signs bearer tokens with this secret. Keep it in the environment.
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "change-me")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
JWT_AUDIENCE = os.getenv("JWT_AUDIENCE")

# =================================================================

# Capabilities per role, as (action, resource) pairs. "*" matches anything.
ROLE_CAPABILITIES = {
    "admin": {("*", "*")},
    "accounts_officer": {
        ("read", "accounts"), ("create", "accounts"), ("update", "accounts"),
        ("read", "journal_entries"), ("create", "journal_entries"),
        ("read", "reports"),
        ("read", "cash_transactions"), ("create", "cash_transactions"),
        ("approve", "cash_transactions"), ("reject", "cash_transactions"),
        ("read", "daily_cash"), ("recalculate", "daily_cash"),
        ("read", "expense_categories"), ("manage", "expense_categories"),
    },
    "manager": {
        ("read", "accounts"), ("read", "journal_entries"), ("create", "journal_entries"),
        ("read", "reports"),
        ("read", "cash_transactions"), ("create", "cash_transactions"),
        ("approve", "cash_transactions"), ("reject", "cash_transactions"),
        ("read", "daily_cash"), ("recalculate", "daily_cash"),
        ("read", "expense_categories"), ("manage", "expense_categories"),
    },
    "cashier": {
        ("read", "cash_transactions"), ("create", "cash_transactions"),
        ("read", "daily_cash"),
        ("read", "expense_categories"),
    },
}


def get_current_user(request: Request) -> Dict[str, Any]:
    """
    FastAPI dependency to validate the JWT from the Authorization header.

    Returns the token claims. The ledger trusts them as-is: `sub` is the actor id
    and `role` drives authorize().
    """
    auth_header = request.headers.get("Authorization")
    if not auth_header:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authorization header is missing",
        )

    # The token is expected to be in the format "Bearer <token>"
    parts = auth_header.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
        )

    token = parts[1]
    options = {"verify_aud": JWT_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET_KEY,
            algorithms=[JWT_ALGORITHM],
            audience=JWT_AUDIENCE,
            options=options,
        )
    except ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired"
        )
    except JWTClaimsError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Invalid token claims: {e}"
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token validation failed: {e}"
        )

    if not payload.get("sub"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has no subject",
        )
    return payload


def get_user_identifier(user: Dict[str, Any]) -> str:
    return str(user.get("sub") or user.get("username") or "unknown")


def get_user_role(user: Dict[str, Any]) -> Optional[str]:
    role = user.get("role")
    if role:
        return role
    # Cognito-style tokens carry groups instead of a single role
    groups = user.get("cognito:groups") or []
    return groups[0] if groups else None


def authorize(user: Dict[str, Any], action: str, resource: str) -> bool:
    capabilities = ROLE_CAPABILITIES.get(get_user_role(user), set())
    return any(
        cap_action in ("*", action) and cap_resource in ("*", resource)
        for cap_action, cap_resource in capabilities
    )


def require_permission(action: str, resource: str):
    """Dependency factory: the current user must hold (action, resource)."""
    def dependency(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
        if not authorize(user, action, resource):
            logger.warning(f"User {get_user_identifier(user)} denied {action} on {resource}")
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Not allowed to {action} {resource}",
            )
        return user
    return dependency
