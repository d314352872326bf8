"""
Cas d'usage 'payments' côté serveur: création d'intention et vérification de signature.
"""
import logging
from typing import Any, Dict

from fastapi import HTTPException
from pydantic import ValidationError

import storefront.config as config
from . import gateway_client
from .models import CreateIntentRequest, VerifyPaymentRequest
from .signature import verify_signature

logger = logging.getLogger(__name__)


async def create_payment_intent(body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Crée l'ordre Razorpay correspondant à une commande.
    - 400 si le montant est absent ou invalide
    - 500/502/504 selon l'erreur passerelle
    Retour: {success, order{id, amount, currency, ...}, key_id}
    """
    if not isinstance(body, dict) or body.get("amount") in (None, ""):
        raise HTTPException(status_code=400, detail="Données de commande incomplètes (montant manquant)")
    try:
        req = CreateIntentRequest.model_validate(body)
    except ValidationError:
        raise HTTPException(status_code=400, detail="Montant de commande invalide")

    try:
        order = await gateway_client.create_gateway_order(
            amount=req.amount,
            currency=req.currency,
            receipt=req.receipt,
            notes=req.notes,
        )
    except gateway_client.GatewayError as e:
        raise HTTPException(status_code=e.status_code, detail=f"Échec de création du paiement: {e.message}")
    return {"success": True, "order": order, "key_id": config.RAZORPAY_KEY_ID}


def verify_payment(body: Dict[str, Any]) -> Dict[str, Any]:
    """
    Vérifie la signature renvoyée par la fenêtre de paiement.
    - 400 si un champ manque ou si la signature ne correspond pas
    - 500 si le secret serveur n'est pas configuré
    """
    try:
        req = VerifyPaymentRequest.model_validate(body if isinstance(body, dict) else {})
    except ValidationError:
        raise HTTPException(status_code=400, detail="Données de vérification du paiement manquantes")

    secret = config.RAZORPAY_KEY_SECRET
    if not secret:
        raise HTTPException(status_code=500, detail="Secret de paiement non configuré")

    if not verify_signature(req.gateway_order_id, req.payment_id, req.signature, secret):
        logger.warning(
            "payments.service.verify_payment signature mismatch gateway_order_id=%s payment_id=%s",
            req.gateway_order_id, req.payment_id,
        )
        raise HTTPException(status_code=400, detail="Échec de la vérification du paiement")

    logger.info("payments.service.verify_payment ok gateway_order_id=%s", req.gateway_order_id)
    return {
        "success": True,
        "message": "Paiement vérifié",
        "paymentId": req.payment_id,
        "gatewayOrderId": req.gateway_order_id,
    }
