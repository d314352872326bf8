"""
Session client (lecture seule pour le tunnel de commande).

La session est produite par la couche d'authentification (Supabase Auth) et
injectée telle quelle: le checkout ne la modifie jamais.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class Session(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    user_id: str = Field(alias="userId")
    email: str = ""
    display_name: str = Field(default="", alias="displayName")
    logged_in: bool = Field(default=True, alias="loggedIn")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    access_token: Optional[str] = Field(default=None, alias="accessToken")


def session_from_user(user: Dict[str, Any]) -> Session:
    """Construit une Session depuis le dict utilisateur normalisé {id, email, metadata, token}."""
    metadata = user.get("metadata") or user.get("user_metadata") or {}
    return Session(
        user_id=str(user.get("id") or ""),
        email=user.get("email") or "",
        display_name=metadata.get("full_name") or metadata.get("display_name") or "",
        access_token=user.get("token"),
    )
