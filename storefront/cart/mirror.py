"""
Miroir distant du panier (table Supabase 'carts', une ligne par utilisateur).
- Utilisé uniquement quand une session existe.
- Toutes les opérations renvoient un résultat {success, ...}, jamais d'exception.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional
import logging

import storefront.infra.supabase_client as supabase_client
from storefront.auth.session import Session
from .models import CartItem, dump_items, parse_items

logger = logging.getLogger(__name__)

CARTS_TABLE = "carts"


@dataclass
class CartSyncResult:
    success: bool
    items: List[CartItem] = field(default_factory=list)
    error: Optional[str] = None


class RemoteCartMirror:
    def __init__(self, session: Session):
        self.session = session

    def _table(self):
        client = supabase_client.get_user_supabase(self.session.access_token or "")
        return client.table(CARTS_TABLE)

    # module storefront.cart.mirror
    def load_cart(self) -> CartSyncResult:
        try:
            res = (
                self._table()
                .select("items")
                .eq("user_id", self.session.user_id)
                .limit(1)
                .execute()
            )
            rows = res.data or []
            items = parse_items(rows[0].get("items")) if rows else []
            return CartSyncResult(True, items=items)
        except Exception as e:
            logger.exception("cart.mirror.load_cart failed user_id=%s", self.session.user_id)
            return CartSyncResult(False, error=str(e))

    def save_cart(self, items: List[CartItem]) -> CartSyncResult:
        try:
            (
                self._table()
                .upsert(
                    {
                        "user_id": self.session.user_id,
                        "items": dump_items(items),
                        "updated_at": datetime.now(timezone.utc).isoformat(),
                    },
                    on_conflict="user_id",
                )
                .execute()
            )
            return CartSyncResult(True, items=list(items))
        except Exception as e:
            logger.exception("cart.mirror.save_cart failed user_id=%s", self.session.user_id)
            return CartSyncResult(False, error=str(e))

    def clear_cart(self) -> CartSyncResult:
        return self.save_cart([])
