"""Supabase client helpers."""

from __future__ import annotations

from functools import lru_cache

from supabase import Client, create_client

from grocery_tracker.domain.errors import AuthenticationError


@lru_cache(maxsize=1)
def get_supabase_client(url: str, key: str) -> Client:
    """Return a cached Supabase client for the given credentials."""
    return create_client(url, key)


def sign_in(client: Client, *, email: str, password: str) -> str:
    """Open a password session on ``client`` and return its access token."""
    try:
        response = client.auth.sign_in_with_password({"email": email, "password": password})
    except Exception as exc:
        raise AuthenticationError(f"Sign-in failed: {exc}") from exc
    session = getattr(response, "session", None)
    if session is None:
        raise AuthenticationError("Sign-in returned no session")
    return session.access_token
