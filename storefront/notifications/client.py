"""
Client HTTP du tunnel de commande vers l'endpoint d'emails.
Best-effort: toute erreur devient {success: False}, rien ne remonte.
"""
import logging
from typing import Any, Dict

import httpx

from storefront.orders.models import OrderDraft

logger = logging.getLogger(__name__)

SEND_ORDER_EMAIL_PATH = "/api/send-order-email"


class HttpEmailNotifier:
    def __init__(self, http: httpx.AsyncClient, path: str = SEND_ORDER_EMAIL_PATH):
        self.http = http
        self.path = path

    async def send_order_emails(self, draft: OrderDraft) -> Dict[str, Any]:
        try:
            resp = await self.http.post(self.path, json=draft.to_wire())
            data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("notifications.client.send_order_emails failed reference=%s: %s", draft.order_reference, e)
            return {"success": False, "error": str(e)}
        if resp.status_code >= 400 or not isinstance(data, dict):
            logger.warning(
                "notifications.client.send_order_emails rejected reference=%s status=%s",
                draft.order_reference, resp.status_code,
            )
            message = data.get("message") if isinstance(data, dict) else None
            return {"success": False, "error": message or f"HTTP {resp.status_code}"}
        return data
