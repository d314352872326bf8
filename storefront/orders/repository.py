"""
Accès aux données pour la feature 'orders' (table Supabase 'orders').

- Toute commande appartient à un utilisateur connecté: sans session, rien n'est écrit.
- Les écritures passent par le client Supabase de l'utilisateur (RLS actif).
- created_at est fixé par la base (DEFAULT now()) dans le même INSERT.
- Aucune méthode ne lève: le résultat porte success/error/requires_auth.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

import storefront.infra.supabase_client as supabase_client
from storefront.auth.session import Session
from .models import OrderDraft, PaymentStatus, Verification

logger = logging.getLogger(__name__)

ORDERS_TABLE = "orders"
AUTH_REQUIRED_MESSAGE = "Veuillez vous connecter pour passer commande"


@dataclass
class OrderAuthRequirement:
    requires_auth: bool
    is_authenticated: bool


@dataclass
class OrderResult:
    success: bool
    order_id: Optional[str] = None
    requires_auth: bool = False
    error: Optional[str] = None
    duplicate: bool = False
    order_reference: Optional[str] = None


@dataclass
class OrderListResult:
    success: bool
    orders: List[Dict[str, Any]] = field(default_factory=list)
    requires_auth: bool = False
    error: Optional[str] = None


class OrderRepository:
    def __init__(self, session: Optional[Session]):
        self.session = session

    def _table(self):
        client = supabase_client.get_user_supabase(self.session.access_token or "")
        return client.table(ORDERS_TABLE)

    # module storefront.orders.repository
    def check_order_auth_requirement(self) -> OrderAuthRequirement:
        return OrderAuthRequirement(requires_auth=True, is_authenticated=self.session is not None)

    def _find_by_idempotency_key(self, key: str) -> Optional[Dict[str, Any]]:
        res = (
            self._table()
            .select("id, order_reference, payment_status")
            .eq("user_id", self.session.user_id)
            .eq("idempotency_key", key)
            .limit(1)
            .execute()
        )
        rows = res.data or []
        return dict(rows[0]) if rows else None

    def _resume_pending(self, order_id: str, draft: OrderDraft) -> None:
        """Nouvelle tentative de paiement sur une commande restée 'pending': elle suit le nouvel ordre passerelle."""
        (
            self._table()
            .update(
                {
                    "gateway_order_id": draft.gateway_order_id,
                    "order_reference": draft.order_reference,
                    "payment_updated_at": datetime.now(timezone.utc).isoformat(),
                }
            )
            .eq("id", order_id)
            .eq("user_id", self.session.user_id)
            .execute()
        )

    def save_order(self, draft: OrderDraft) -> OrderResult:
        if self.session is None:
            return OrderResult(False, requires_auth=True, error=AUTH_REQUIRED_MESSAGE)
        try:
            if draft.idempotency_key:
                existing = self._find_by_idempotency_key(draft.idempotency_key)
                if existing:
                    order_id = str(existing["id"])
                    logger.info(
                        "orders.repository.save_order duplicate idempotency_key user_id=%s order_id=%s",
                        self.session.user_id, order_id,
                    )
                    if existing.get("payment_status") == PaymentStatus.PENDING.value and draft.gateway_order_id:
                        self._resume_pending(order_id, draft)
                        return OrderResult(True, order_id=order_id, duplicate=True, order_reference=draft.order_reference)
                    return OrderResult(
                        True, order_id=order_id, duplicate=True, order_reference=existing.get("order_reference")
                    )

            record = draft.to_record()
            record["user_id"] = self.session.user_id
            res = self._table().insert(record).execute()
            rows = res.data or []
            if not rows or not rows[0].get("id"):
                return OrderResult(False, error="Commande non enregistrée")
            return OrderResult(True, order_id=str(rows[0]["id"]))
        except Exception as e:
            logger.exception(
                "orders.repository.save_order failed user_id=%s reference=%s",
                self.session.user_id, draft.order_reference,
            )
            return OrderResult(False, error=str(e))

    def update_order_payment_status(
        self,
        order_id: str,
        *,
        payment_status: PaymentStatus,
        payment_id: Optional[str] = None,
        payment_signature: Optional[str] = None,
        verification: Optional[Verification] = None,
    ) -> OrderResult:
        if self.session is None:
            return OrderResult(False, requires_auth=True, error=AUTH_REQUIRED_MESSAGE)
        patch: Dict[str, Any] = {
            "payment_status": PaymentStatus(payment_status).value,
            "payment_updated_at": datetime.now(timezone.utc).isoformat(),
        }
        if payment_id:
            patch["payment_id"] = payment_id
        if payment_signature:
            patch["payment_signature"] = payment_signature
        if verification:
            patch["verification"] = Verification(verification).value
        try:
            (
                self._table()
                .update(patch)
                .eq("id", order_id)
                .eq("user_id", self.session.user_id)
                .execute()
            )
            return OrderResult(True, order_id=order_id)
        except Exception as e:
            logger.exception("orders.repository.update_order_payment_status failed order_id=%s", order_id)
            return OrderResult(False, order_id=order_id, error=str(e))

    def get_user_orders(self, limit: int = 50) -> OrderListResult:
        """Historique de l'utilisateur courant, du plus récent au plus ancien."""
        if self.session is None:
            return OrderListResult(False, requires_auth=True, error=AUTH_REQUIRED_MESSAGE)
        try:
            res = (
                self._table()
                .select("*")
                .eq("user_id", self.session.user_id)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
            orders = []
            for row in res.data or []:
                row = dict(row)
                row.setdefault("order_date", row.get("created_at"))
                orders.append(row)
            return OrderListResult(True, orders=orders)
        except Exception as e:
            logger.exception("orders.repository.get_user_orders failed user_id=%s", self.session.user_id)
            return OrderListResult(False, error=str(e))
