"""
Contexte d'un tunnel de commande: toutes les dépendances, construites une fois par session.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

import httpx

from storefront.config import API_BASE_URL
from storefront.auth.session import Session
from storefront.cart.backends import CartBackend, select_cart_backend
from storefront.cart.store import CartStore
from storefront.infra.local_storage import LocalStorage
from storefront.notifications.client import HttpEmailNotifier
from storefront.orders.models import OrderDraft
from storefront.orders.repository import OrderRepository
from storefront.payments.adapter import HostedCheckoutFactory, PaymentGatewayAdapter
from .view import CheckoutView


class EmailNotifier(Protocol):
    async def send_order_emails(self, draft: OrderDraft) -> Dict[str, Any]: ...


@dataclass
class CheckoutContext:
    session: Optional[Session]
    cart: CartBackend
    orders: OrderRepository
    payments: PaymentGatewayAdapter
    notifier: EmailNotifier
    view: CheckoutView


def build_http_client(base_url: str = API_BASE_URL) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url=base_url, timeout=30)


def build_checkout_context(
    *,
    session: Optional[Session],
    storage: LocalStorage,
    http: httpx.AsyncClient,
    ui_factory: HostedCheckoutFactory,
    view: CheckoutView,
) -> CheckoutContext:
    store = CartStore(storage)
    return CheckoutContext(
        session=session,
        cart=select_cart_backend(store, session),
        orders=OrderRepository(session),
        payments=PaymentGatewayAdapter(http, ui_factory),
        notifier=HttpEmailNotifier(http),
        view=view,
    )
