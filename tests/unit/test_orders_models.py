import re

import pytest

from storefront.cart.models import CartItem
from storefront.orders.models import (
    Customer,
    OrderDraft,
    PaymentMethod,
    build_order_draft,
    generate_order_reference,
    make_idempotency_key,
)


@pytest.fixture
def customer(address_form) -> Customer:
    return Customer.model_validate(address_form)


def test_reference_format():
    ref = generate_order_reference(prefix="AURIC", now_ms=1700000123456)
    assert re.fullmatch(r"AURIC-123456-\d{4}", ref)


def test_customer_address_composed(customer):
    assert customer.address == "12B, MG Road, Kolkata, West Bengal - 700001"
    assert customer.full_name == "Priya Sharma"


def test_draft_total_recomputed_from_products(order_payload):
    order_payload["orderTotal"] = 1
    draft = OrderDraft.model_validate(order_payload)
    assert draft.order_total == 2000
    assert draft.products[0].total == 2000


def test_build_draft_snapshots_cart(customer, ring, necklace):
    items = [ring, necklace]

    draft = build_order_draft(items=items, customer=customer, payment_method=PaymentMethod.CASH_ON_DELIVERY, user_id="u1")
    items[0] = CartItem(id="ring-1", price=1, quantity=99)

    assert draft.products[0].quantity == 2
    assert draft.order_total == round(sum(p.total for p in draft.products), 2)
    assert draft.payment_status is None
    assert draft.idempotency_key


def test_wire_form_is_camel_case(order_payload):
    wire = OrderDraft.model_validate(order_payload).to_wire()
    assert wire["orderReference"] == "AURIC-123456-0042"
    assert wire["customer"]["firstName"] == "Priya"
    assert wire["paymentMethod"] == "Cash on Delivery"
    assert "paymentStatus" not in wire


def test_record_is_snake_case_without_order_id(order_payload):
    draft = OrderDraft.model_validate(order_payload)
    draft.order_id = "abc"
    record = draft.to_record()
    assert record["order_reference"] == "AURIC-123456-0042"
    assert "order_id" not in record


def test_idempotency_key_stable_within_window(ring):
    k1 = make_idempotency_key("u1", [ring], "Razorpay", now=1000, window_seconds=600)
    k2 = make_idempotency_key("u1", [ring], "Razorpay", now=1100, window_seconds=600)
    k3 = make_idempotency_key("u2", [ring], "Razorpay", now=1100, window_seconds=600)
    k4 = make_idempotency_key("u1", [ring], "Razorpay", now=1300, window_seconds=600)
    assert k1 == k2
    assert k1 != k3
    assert k1 != k4


def test_idempotency_key_scoped_to_customer_notes_and_checkout(ring, customer, address_form):
    other_city = Customer.model_validate(dict(address_form, city="Mumbai"))
    base = make_idempotency_key("u1", [ring], "Razorpay", now=1000, customer=customer, nonce="n1")

    assert base == make_idempotency_key("u1", [ring], "Razorpay", now=1000, customer=customer, nonce="n1")
    assert base != make_idempotency_key("u1", [ring], "Razorpay", now=1000, customer=other_city, nonce="n1")
    assert base != make_idempotency_key("u1", [ring], "Razorpay", now=1000, customer=customer, nonce="n1", notes="cadeau")
    assert base != make_idempotency_key("u1", [ring], "Razorpay", now=1000, customer=customer, nonce="n2")


def test_empty_products_rejected(order_payload):
    order_payload["products"] = []
    with pytest.raises(ValueError):
        OrderDraft.model_validate(order_payload)
