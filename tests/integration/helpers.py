"""Shared helpers for integration tests."""

from uuid import uuid4

from src.pf_gateway.auth.jwt_handler import create_access_token


def auth_headers() -> dict[str, str]:
    """Headers for a brand-new user: every test starts with empty books."""
    return {"Authorization": f"Bearer {create_access_token(str(uuid4()))}"}
