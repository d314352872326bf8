from storefront.payments.signature import compute_signature


def test_create_order_success(client, monkeypatch):
    async def _fake_create(**kwargs):
        return {"id": "order_abc", "amount": int(round(kwargs["amount"] * 100)), "currency": kwargs["currency"]}
    monkeypatch.setattr("storefront.payments.gateway_client.create_gateway_order", _fake_create)
    monkeypatch.setattr("storefront.config.RAZORPAY_KEY_ID", "rzp_test_key")

    r = client.post("/api/create-razorpay-order", json={"amount": 2000, "currency": "INR", "receipt": "AURIC-1"})

    assert r.status_code == 200
    body = r.json()
    assert body["success"] is True
    assert body["order"] == {"id": "order_abc", "amount": 200000, "currency": "INR"}
    assert body["key_id"] == "rzp_test_key"
    assert r.headers["Cache-Control"].startswith("no-store")


def test_create_order_missing_amount(client):
    r = client.post("/api/create-razorpay-order", json={"currency": "INR"})
    assert r.status_code == 400
    assert r.json()["success"] is False


def test_create_order_invalid_json(client):
    r = client.post("/api/create-razorpay-order", content=b"{oops", headers={"Content-Type": "application/json"})
    assert r.status_code == 400


def test_verify_payment_ok(client, monkeypatch):
    monkeypatch.setattr("storefront.config.RAZORPAY_KEY_SECRET", "s3cret")
    sig = compute_signature("order_1", "pay_1", "s3cret")

    r = client.post(
        "/api/verify-razorpay-payment",
        json={"paymentId": "pay_1", "gatewayOrderId": "order_1", "signature": sig},
    )

    assert r.status_code == 200
    assert r.json()["success"] is True


def test_verify_payment_bad_signature(client, monkeypatch):
    monkeypatch.setattr("storefront.config.RAZORPAY_KEY_SECRET", "s3cret")

    r = client.post(
        "/api/verify-razorpay-payment",
        json={"razorpay_payment_id": "pay_1", "razorpay_order_id": "order_1", "razorpay_signature": "0" * 64},
    )

    assert r.status_code == 400
    assert r.json()["message"] == "Échec de la vérification du paiement"


def test_verify_payment_missing_fields(client, monkeypatch):
    monkeypatch.setattr("storefront.config.RAZORPAY_KEY_SECRET", "s3cret")
    r = client.post("/api/verify-razorpay-payment", json={"paymentId": "pay_1"})
    assert r.status_code == 400
