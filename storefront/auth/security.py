from typing import Any, Dict

from fastapi import Depends, HTTPException, Request

import storefront.infra.supabase_client as supabase_client
from .session import Session, session_from_user

COOKIE_NAME = "sb_access"

def get_user_from_access_token(access_token: str) -> Dict[str, Any]:
    """Récupère et normalise l’utilisateur depuis supabase.auth.get_user(access_token)."""
    res = supabase_client.get_supabase().auth.get_user(access_token)
    user = getattr(res, "user", None) or {}
    if not isinstance(user, dict):
        user = {
            "id": getattr(user, "id", None),
            "email": getattr(user, "email", None),
            "user_metadata": getattr(user, "user_metadata", None),
        }
    return user or {}

def get_current_user(request: Request) -> Dict[str, Any]:
    # Hybride: priorité au Bearer, fallback cookie
    token = None
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        token = auth_header[7:].strip()
    if not token:
        token = request.cookies.get(COOKIE_NAME)

    if not token:
        raise HTTPException(status_code=401, detail="Non authentifié")

    try:
        raw = get_user_from_access_token(token)
    except Exception:
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    if not raw.get("id"):
        raise HTTPException(status_code=401, detail="Session expirée, veuillez vous connecter")
    return {
        "id": raw.get("id"),
        "email": raw.get("email"),
        "metadata": raw.get("user_metadata") or {},
        "token": token,
    }

def require_user(user: Dict[str, Any] = Depends(get_current_user)) -> Dict[str, Any]:
    return user

def require_session(user: Dict[str, Any] = Depends(require_user)) -> Session:
    return session_from_user(user)
