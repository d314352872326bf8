import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from storefront.orders.models import OrderDraft
from . import email_service
from .email_config import load_smtp_settings

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["Notifications API"])


# module storefront.notifications.views
@router.post("/send-order-email")
async def send_order_email(request: Request):
    """
    Envoie la confirmation client et la notification propriétaire d'une commande.
    - 400: JSON invalide, client ou articles manquants
    - 500: identifiants SMTP absents, ou échec d'envoi (détail par destinataire)
    """
    settings = load_smtp_settings()
    if not settings.has_credentials:
        logger.error("notifications.views.send_order_email SMTP credentials missing")
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "message": "Configuration email incomplète",
                "debug": {"hasEmailUser": bool(settings.user), "hasEmailPass": bool(settings.password)},
            },
        )

    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="JSON invalide")
    if not isinstance(body, dict) or not body.get("customer") or not body.get("products"):
        raise HTTPException(status_code=400, detail="Données de commande incomplètes (client ou articles manquants)")

    try:
        draft = OrderDraft.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Commande invalide: {e.error_count()} erreur(s) de validation")

    result = await email_service.send_order_emails(draft, settings)
    if not result["success"]:
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": "Échec de l'envoi des emails de commande", "result": result},
        )
    return JSONResponse({"success": True, "message": "Emails de commande envoyés", "result": result})
