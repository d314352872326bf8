import asyncio
import json

import httpx
import pytest

from storefront.orders.models import OrderDraft
from storefront.payments.adapter import (
    EVENT_CANCEL,
    EVENT_CLOSE,
    EVENT_FAILED,
    EVENT_SUCCESS,
    PaymentGatewayAdapter,
    PaymentGatewayError,
    PaymentIntent,
    PaymentTimeout,
)
from storefront.payments.outcomes import Abandoned, Cancelled, Completed, Failed

SUCCESS_PAYLOAD = {
    "razorpay_payment_id": "pay_1",
    "razorpay_order_id": "order_1",
    "razorpay_signature": "sig_1",
}


class ScriptedCheckout:
    """Fenêtre hébergée simulée: rejoue une suite (délai, événement, payload)."""

    def __init__(self, options, script):
        self.options = options
        self.script = script
        self.handlers = {}

    def on(self, event, handler):
        self.handlers[event] = handler

    def open(self):
        loop = asyncio.get_running_loop()
        for delay, event, payload in self.script:
            loop.call_later(delay, self.handlers[event], payload)


def _adapter(script=None, handler=None, **kwargs):
    opened = []

    def factory(options):
        ui = ScriptedCheckout(options, script or [])
        opened.append(ui)
        return ui

    transport = httpx.MockTransport(handler or (lambda request: httpx.Response(404)))
    http = httpx.AsyncClient(base_url="http://checkout.test", transport=transport)
    kwargs.setdefault("close_grace", 0.05)
    return PaymentGatewayAdapter(http, factory, **kwargs), opened


@pytest.fixture
def draft(order_payload) -> OrderDraft:
    return OrderDraft.model_validate(order_payload)


@pytest.fixture
def intent() -> PaymentIntent:
    return PaymentIntent(gateway_order_id="order_1", amount=200000, currency="INR", key_id="rzp_test_key")


@pytest.mark.asyncio
async def test_success_event_yields_completed(draft, intent):
    adapter, opened = _adapter([(0, EVENT_SUCCESS, SUCCESS_PAYLOAD)])

    outcome = await adapter.collect_payment(intent, draft)

    assert outcome == Completed(payment_id="pay_1", gateway_order_id="order_1", signature="sig_1")
    assert opened[0].options["order_id"] == "order_1"
    assert opened[0].options["prefill"]["contact"] == "9876543210"


@pytest.mark.asyncio
async def test_cancel_event_yields_cancelled(draft, intent):
    adapter, _ = _adapter([(0, EVENT_CANCEL, None)])
    assert await adapter.collect_payment(intent, draft) == Cancelled()


@pytest.mark.asyncio
async def test_failed_event_carries_reason(draft, intent):
    adapter, _ = _adapter([(0, EVENT_FAILED, {"error": {"description": "Card declined"}})])
    assert await adapter.collect_payment(intent, draft) == Failed("Card declined")


@pytest.mark.asyncio
async def test_close_without_terminal_event_is_abandoned(draft, intent):
    adapter, _ = _adapter([(0, EVENT_CLOSE, None)], close_grace=0.02)
    assert await adapter.collect_payment(intent, draft) == Abandoned()


@pytest.mark.asyncio
async def test_success_within_grace_wins_over_close(draft, intent):
    adapter, _ = _adapter([(0, EVENT_CLOSE, None), (0.01, EVENT_SUCCESS, SUCCESS_PAYLOAD)], close_grace=0.2)
    outcome = await adapter.collect_payment(intent, draft)
    assert isinstance(outcome, Completed)


@pytest.mark.asyncio
async def test_first_terminal_event_wins(draft, intent):
    adapter, _ = _adapter([(0, EVENT_SUCCESS, SUCCESS_PAYLOAD), (0.01, EVENT_CANCEL, None), (0.02, EVENT_CLOSE, None)])
    outcome = await adapter.collect_payment(intent, draft)
    assert isinstance(outcome, Completed)


@pytest.mark.asyncio
async def test_create_intent_sends_reference_and_notes(draft):
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"success": True, "order": {"id": "order_9", "amount": 200000, "currency": "INR"}, "key_id": "rzp_k"})
    adapter, _ = _adapter(handler=handler)

    intent = await adapter.create_intent(draft)

    assert intent == PaymentIntent(gateway_order_id="order_9", amount=200000, currency="INR", key_id="rzp_k")
    assert seen["path"] == "/api/create-razorpay-order"
    assert seen["body"]["amount"] == 2000
    assert seen["body"]["receipt"] == "AURIC-123456-0042"
    assert seen["body"]["notes"] == {
        "orderReference": "AURIC-123456-0042",
        "customerEmail": "priya@example.com",
        "customerPhone": "9876543210",
    }


@pytest.mark.asyncio
async def test_create_intent_without_key_is_error(draft):
    adapter, _ = _adapter(handler=lambda r: httpx.Response(200, json={"success": True, "order": {"id": "order_9"}}))
    with pytest.raises(PaymentGatewayError):
        await adapter.create_intent(draft)


@pytest.mark.asyncio
async def test_create_intent_server_error_message(draft):
    adapter, _ = _adapter(handler=lambda r: httpx.Response(502, json={"success": False, "message": "gateway down"}))
    with pytest.raises(PaymentGatewayError) as exc:
        await adapter.create_intent(draft)
    assert "gateway down" in str(exc.value)


@pytest.mark.asyncio
async def test_create_intent_timeout(draft):
    async def slow(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json={})
    adapter, _ = _adapter(handler=slow, intent_timeout=0.05)

    with pytest.raises(PaymentTimeout):
        await adapter.create_intent(draft)


@pytest.mark.asyncio
async def test_verify_payment_results():
    completed = Completed(payment_id="pay_1", gateway_order_id="order_1", signature="sig_1")
    ok, _ = _adapter(handler=lambda r: httpx.Response(200, json={"success": True, "message": "ok"}))
    ko, _ = _adapter(handler=lambda r: httpx.Response(400, json={"success": False, "message": "bad signature"}))

    assert (await ok.verify_payment(completed)).success is True
    result = await ko.verify_payment(completed)
    assert result.success is False
    assert result.message == "bad signature"


@pytest.mark.asyncio
async def test_verify_payment_timeout():
    async def slow(request):
        await asyncio.sleep(1)
        return httpx.Response(200, json={"success": True})
    adapter, _ = _adapter(handler=slow, verify_timeout=0.05)

    with pytest.raises(PaymentTimeout):
        await adapter.verify_payment(Completed("pay_1", "order_1", "sig_1"))
