"""
Adaptateur de paiement côté tunnel de commande.

1) create_intent: demande au serveur un ordre Razorpay (délai borné)
2) collect_payment: ouvre la fenêtre hébergée et transforme ses callbacks
   en un unique résultat attendu (Completed / Cancelled / Failed / Abandoned)
3) verify_payment: fait vérifier la signature par le serveur (délai borné)

Les délais utilisent asyncio.wait_for: l'appel perdant est annulé et son
résultat ignoré.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol

import httpx

from storefront.config import (
    CHECKOUT_CLOSE_GRACE,
    CHECKOUT_INTENT_TIMEOUT,
    CHECKOUT_VERIFY_TIMEOUT,
    PAYMENT_CURRENCY,
    STORE_NAME,
)
from storefront.orders.models import OrderDraft
from .outcomes import Abandoned, Cancelled, Completed, Failed, PaymentOutcome

logger = logging.getLogger(__name__)

CREATE_INTENT_PATH = "/api/create-razorpay-order"
VERIFY_PATH = "/api/verify-razorpay-payment"

EVENT_SUCCESS = "payment.success"
EVENT_FAILED = "payment.failed"
EVENT_CANCEL = "payment.cancel"
EVENT_CLOSE = "modal.close"


class PaymentGatewayError(Exception):
    pass


class PaymentTimeout(PaymentGatewayError):
    pass


class HostedCheckout(Protocol):
    def on(self, event: str, handler: Callable[..., Any]) -> None: ...
    def open(self) -> None: ...


HostedCheckoutFactory = Callable[[Dict[str, Any]], HostedCheckout]


@dataclass
class PaymentIntent:
    gateway_order_id: str
    amount: int
    currency: str
    key_id: str


@dataclass
class VerificationResult:
    success: bool
    message: str = ""


def _json(resp: httpx.Response) -> Dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error_message(data: Dict[str, Any], fallback: str) -> str:
    return data.get("message") or data.get("detail") or fallback


class PaymentGatewayAdapter:
    def __init__(
        self,
        http: httpx.AsyncClient,
        ui_factory: HostedCheckoutFactory,
        *,
        intent_timeout: float = CHECKOUT_INTENT_TIMEOUT,
        verify_timeout: float = CHECKOUT_VERIFY_TIMEOUT,
        close_grace: float = CHECKOUT_CLOSE_GRACE,
        store_name: str = STORE_NAME,
    ):
        self.http = http
        self.ui_factory = ui_factory
        self.intent_timeout = intent_timeout
        self.verify_timeout = verify_timeout
        self.close_grace = close_grace
        self.store_name = store_name

    async def _post(self, path: str, payload: Dict[str, Any], timeout: float, label: str) -> httpx.Response:
        try:
            return await asyncio.wait_for(self.http.post(path, json=payload), timeout)
        except asyncio.TimeoutError:
            raise PaymentTimeout(f"{label}: délai de {timeout:g}s dépassé")
        except httpx.HTTPError as e:
            raise PaymentGatewayError(f"{label}: erreur réseau ({e})")

    # module storefront.payments.adapter
    async def create_intent(self, draft: OrderDraft) -> PaymentIntent:
        payload = {
            "amount": draft.order_total,
            "currency": PAYMENT_CURRENCY,
            "receipt": draft.order_reference,
            "notes": {
                "orderReference": draft.order_reference,
                "customerEmail": draft.customer.email,
                "customerPhone": draft.customer.phone,
            },
        }
        resp = await self._post(CREATE_INTENT_PATH, payload, self.intent_timeout, "Création du paiement")
        data = _json(resp)
        if resp.status_code >= 400 or not data.get("success"):
            raise PaymentGatewayError(_error_message(data, f"Création du paiement refusée (HTTP {resp.status_code})"))
        order = data.get("order") or {}
        key_id = data.get("key_id")
        if not order.get("id") or not key_id:
            raise PaymentGatewayError("Réponse invalide du serveur de paiement")
        return PaymentIntent(
            gateway_order_id=str(order["id"]),
            amount=int(order.get("amount") or 0),
            currency=order.get("currency") or payload["currency"],
            key_id=str(key_id),
        )

    def _checkout_options(self, intent: PaymentIntent, draft: OrderDraft) -> Dict[str, Any]:
        customer = draft.customer
        return {
            "key": intent.key_id,
            "amount": intent.amount,
            "currency": intent.currency,
            "name": self.store_name,
            "description": f"Commande {draft.order_reference}",
            "order_id": intent.gateway_order_id,
            "prefill": {
                "name": customer.full_name,
                "email": customer.email,
                "contact": customer.phone,
            },
            "notes": {"orderReference": draft.order_reference},
        }

    async def collect_payment(self, intent: PaymentIntent, draft: OrderDraft) -> PaymentOutcome:
        """
        Ouvre la fenêtre hébergée et attend son issue.
        - Le premier événement terminal l'emporte, les suivants sont ignorés.
        - Une fermeture sans événement terminal déclenche un délai de grâce:
          un succès arrivant pendant ce délai reste valide, sinon Abandoned.
        """
        loop = asyncio.get_running_loop()
        outcome: "asyncio.Future[PaymentOutcome]" = loop.create_future()
        grace_timer: Optional[asyncio.TimerHandle] = None

        def settle(result: PaymentOutcome) -> None:
            if grace_timer is not None:
                grace_timer.cancel()
            if not outcome.done():
                outcome.set_result(result)

        def on_success(response: Optional[Dict[str, Any]] = None) -> None:
            response = response or {}
            payment_id = response.get("razorpay_payment_id")
            gateway_order_id = response.get("razorpay_order_id") or intent.gateway_order_id
            signature = response.get("razorpay_signature")
            if not payment_id or not signature:
                settle(Failed("Réponse de paiement incomplète"))
                return
            settle(Completed(payment_id=payment_id, gateway_order_id=gateway_order_id, signature=signature))

        def on_failed(response: Optional[Dict[str, Any]] = None) -> None:
            error = (response or {}).get("error") or {}
            settle(Failed(error.get("description") or "Paiement refusé"))

        def on_cancel(*_: Any) -> None:
            settle(Cancelled())

        def on_close(*_: Any) -> None:
            nonlocal grace_timer
            if outcome.done() or grace_timer is not None:
                return
            grace_timer = loop.call_later(self.close_grace, settle, Abandoned())

        ui = self.ui_factory(self._checkout_options(intent, draft))
        ui.on(EVENT_SUCCESS, on_success)
        ui.on(EVENT_FAILED, on_failed)
        ui.on(EVENT_CANCEL, on_cancel)
        ui.on(EVENT_CLOSE, on_close)
        ui.open()
        result = await outcome
        logger.info(
            "payments.adapter.collect_payment reference=%s outcome=%s",
            draft.order_reference, type(result).__name__,
        )
        return result

    async def verify_payment(self, completed: Completed) -> VerificationResult:
        payload = {
            "paymentId": completed.payment_id,
            "gatewayOrderId": completed.gateway_order_id,
            "signature": completed.signature,
        }
        resp = await self._post(VERIFY_PATH, payload, self.verify_timeout, "Vérification du paiement")
        data = _json(resp)
        if resp.status_code >= 400 or not data.get("success"):
            return VerificationResult(False, _error_message(data, "Échec de la vérification du paiement"))
        return VerificationResult(True, data.get("message") or "")
