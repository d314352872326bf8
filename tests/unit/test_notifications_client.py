import json

import httpx
import pytest

from storefront.auth.session import session_from_user
from storefront.cart.backends import LocalCartBackend, MirroredCartBackend
from storefront.checkout.context import build_checkout_context
from storefront.checkout.view import RecordingView
from storefront.infra.local_storage import MemoryStorage
from storefront.notifications.client import HttpEmailNotifier
from storefront.orders.models import OrderDraft


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(base_url="http://checkout.test", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_notifier_posts_camel_case_order(order_payload):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "message": "Emails de commande envoyés"})

    async with _client(handler) as http:
        result = await HttpEmailNotifier(http).send_order_emails(OrderDraft.model_validate(order_payload))

    assert result["success"] is True
    assert seen["path"] == "/api/send-order-email"
    assert seen["body"]["orderReference"] == "AURIC-123456-0042"
    assert seen["body"]["customer"]["firstName"] == "Priya"


@pytest.mark.asyncio
async def test_notifier_reports_server_rejection(order_payload):
    def handler(request):
        return httpx.Response(500, json={"success": False, "message": "Configuration email incomplète"})

    async with _client(handler) as http:
        result = await HttpEmailNotifier(http).send_order_emails(OrderDraft.model_validate(order_payload))

    assert result == {"success": False, "error": "Configuration email incomplète"}


@pytest.mark.asyncio
async def test_notifier_swallows_transport_errors(order_payload):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    async with _client(handler) as http:
        result = await HttpEmailNotifier(http).send_order_emails(OrderDraft.model_validate(order_payload))

    assert result["success"] is False


def test_session_from_normalized_user():
    session = session_from_user(
        {"id": "u-9", "email": "a@example.com", "metadata": {"full_name": "Asha"}, "token": "tok"}
    )
    assert (session.user_id, session.display_name, session.access_token) == ("u-9", "Asha", "tok")


@pytest.mark.asyncio
async def test_context_picks_cart_backend_from_session(session):
    async with _client(lambda r: httpx.Response(200, json={})) as http:
        anonymous = build_checkout_context(
            session=None, storage=MemoryStorage(), http=http, ui_factory=lambda opts: None, view=RecordingView()
        )
        signed_in = build_checkout_context(
            session=session, storage=MemoryStorage(), http=http, ui_factory=lambda opts: None, view=RecordingView()
        )

    assert isinstance(anonymous.cart, LocalCartBackend)
    assert isinstance(signed_in.cart, MirroredCartBackend)
    assert signed_in.orders.session == session
