"""Dependency factories for the HTTP layer."""

from __future__ import annotations

from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from supabase import Client

from grocery_tracker.adapters.supabase_client import get_supabase_client
from grocery_tracker.config import Settings, get_settings
from grocery_tracker.services.gateway import RemoteGateway

# Supabase access token sent as "Authorization: Bearer <token>"
bearer_scheme = HTTPBearer(auto_error=False)


def get_supabase() -> Client:
    settings = get_settings()
    return get_supabase_client(settings.supabase_url, settings.supabase_key)


def get_gateway(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    supabase: Client = Depends(get_supabase),
) -> RemoteGateway:
    """Gateway bound to the caller's session; fails with 401 when it has none."""
    token = credentials.credentials if credentials else None
    gateway = RemoteGateway(supabase, access_token=token)
    gateway.require_user()
    return gateway


__all__ = ["Settings", "get_settings", "get_supabase", "get_gateway"]
