import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse

from storefront.utils.rate_limit import optional_rate_limit
from storefront.payments import service as payments_service

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Payments API"])


async def _read_json(request: Request):
    try:
        return await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="JSON invalide")


# module storefront.payments.views
@router.post("/create-razorpay-order", dependencies=[Depends(optional_rate_limit(times=10, seconds=60))])
async def create_razorpay_order(request: Request):
    """
    Crée l'ordre de paiement Razorpay pour une commande.
    - Entrée JSON: {amount (unités principales), currency, receipt, notes}
    - Sécurité: rate limit (10 req / 60s)
    - Sortie: {success, order{id, amount, currency}, key_id}
    """
    body = await _read_json(request)
    return JSONResponse(await payments_service.create_payment_intent(body))


@router.post("/verify-razorpay-payment")
async def verify_razorpay_payment(request: Request):
    """
    Vérifie la signature HMAC d'un paiement.
    - Entrée JSON: {paymentId, gatewayOrderId, signature} (ou razorpay_*)
    - 400 si incomplet ou signature invalide
    """
    body = await _read_json(request)
    return JSONResponse(payments_service.verify_payment(body))
