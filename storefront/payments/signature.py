import hashlib
import hmac


def compute_signature(gateway_order_id: str, payment_id: str, secret: str) -> str:
    """HMAC-SHA256 (hex) de "<gateway_order_id>|<payment_id>" avec le secret serveur."""
    message = f"{gateway_order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify_signature(gateway_order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    if not (gateway_order_id and payment_id and signature and secret):
        return False
    expected = compute_signature(gateway_order_id, payment_id, secret)
    return hmac.compare_digest(expected, signature)
