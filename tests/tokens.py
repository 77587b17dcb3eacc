"""Helpers for inspecting issued tokens in tests."""

from typing import Any

import jwt


def read_claims(token: str) -> dict[str, Any]:
    """Decode a JWT without verifying it."""
    return jwt.decode(token, options={"verify_signature": False})
