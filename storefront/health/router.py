from datetime import datetime, timezone

from fastapi import APIRouter, Request

import storefront.config as config
from storefront.notifications.email_config import load_smtp_settings
from storefront.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/api/health", tags=["Health"])

def _flag(value: str) -> str:
    return "Set" if value else "Not set"

@router.get("")
def health_root(request: Request):
    """
    État de configuration (sans jamais exposer de secret): SMTP, Razorpay, rate limit.
    """
    smtp = load_smtp_settings()
    return {
        "status": "OK",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "emailConfig": {
            "service": smtp.service or smtp.host or "Not set",
            "user": _flag(smtp.user),
            "pass": _flag(smtp.password),
        },
        "razorpayConfig": {
            "key_id": _flag(config.RAZORPAY_KEY_ID),
            "key_secret": _flag(config.RAZORPAY_KEY_SECRET),
        },
        "rateLimit": rate_limit_health_info(request),
    }
