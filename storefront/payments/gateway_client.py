"""
Adaptateur Razorpay: centralise les appels à l'API Orders (REST, httpx).
Le secret reste côté serveur; le client ne reçoit que key_id.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from storefront.config import RAZORPAY_API_URL, RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET

logger = logging.getLogger(__name__)

GATEWAY_TIMEOUT = 15


class GatewayError(Exception):
    def __init__(self, message: str, status_code: int = 502):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def to_minor_units(amount: float) -> int:
    """Montant en unités principales -> plus petite unité (paise), arrondi."""
    return int(round(float(amount) * 100))


def require_credentials() -> None:
    if not RAZORPAY_KEY_ID or not RAZORPAY_KEY_SECRET:
        raise GatewayError("Identifiants Razorpay manquants côté serveur", status_code=500)


def _error_description(resp: httpx.Response) -> str:
    try:
        data = resp.json()
    except ValueError:
        return f"HTTP {resp.status_code}"
    err = (data or {}).get("error") or {}
    return err.get("description") or f"HTTP {resp.status_code}"


# module storefront.payments.gateway_client
async def create_gateway_order(
    *,
    amount: float,
    currency: str,
    receipt: str,
    notes: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Crée un ordre de paiement Razorpay.
    - amount: unités principales (ex: 2000.0 INR), converti en paise
    - receipt: référence commande (tronquée à 40 caractères, limite Razorpay)
    Retour: dict ordre Razorpay (id, amount, currency, status, ...)
    """
    require_credentials()
    payload = {
        "amount": to_minor_units(amount),
        "currency": currency,
        "receipt": (receipt or "")[:40],
        "notes": {k: str(v)[:256] for k, v in (notes or {}).items() if v is not None},
    }
    try:
        async with httpx.AsyncClient(timeout=GATEWAY_TIMEOUT) as client:
            resp = await client.post(
                f"{RAZORPAY_API_URL}/orders",
                json=payload,
                auth=(RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET),
            )
    except httpx.TimeoutException:
        raise GatewayError("La passerelle de paiement n'a pas répondu", status_code=504)
    except httpx.HTTPError as e:
        logger.exception("payments.gateway_client.create_gateway_order transport error receipt=%s", receipt)
        raise GatewayError(f"Erreur de connexion à la passerelle: {e}")

    if resp.status_code >= 400:
        description = _error_description(resp)
        logger.error("payments.gateway_client.create_gateway_order rejected receipt=%s: %s", receipt, description)
        raise GatewayError(description)
    order = resp.json()
    logger.info("payments.gateway_client order created id=%s receipt=%s", order.get("id"), receipt)
    return order
