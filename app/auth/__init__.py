"""Authentication module."""

from app.auth.auth import admin_required, token_required, validate_token

__all__ = ["admin_required", "token_required", "validate_token"]
