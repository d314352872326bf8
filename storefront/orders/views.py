import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from storefront.auth.security import require_session
from storefront.auth.session import Session
from .repository import OrderRepository

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/orders", tags=["Orders API"])

# module storefront.orders.views
@router.get("")
def list_my_orders(session: Session = Depends(require_session)):
    """
    Historique des commandes de l'utilisateur connecté (suivi de commande).
    - Sécurité: Bearer ou cookie de session, RLS côté Supabase
    - Tri: plus récentes d'abord
    """
    result = OrderRepository(session).get_user_orders()
    if not result.success:
        logger.error("orders.views.list_my_orders failed user_id=%s: %s", session.user_id, result.error)
        raise HTTPException(status_code=500, detail="Impossible de charger vos commandes")
    return JSONResponse({"success": True, "orders": result.orders})
