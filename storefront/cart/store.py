# module storefront.cart.store
import json
import logging
from typing import List

from storefront.config import CART_STORAGE_KEY
from storefront.infra.local_storage import LocalStorage
from .models import CartItem, dump_items, parse_items

logger = logging.getLogger(__name__)


class CartStore:
    """
    Panier local: une seule clé de stockage contenant une liste JSON d'articles.
    Lecture tolérante (toute erreur => panier vide), écriture synchrone.
    """

    def __init__(self, storage: LocalStorage, key: str = CART_STORAGE_KEY):
        self.storage = storage
        self.key = key

    def get_items(self) -> List[CartItem]:
        try:
            raw = self.storage.get_item(self.key)
            if not raw:
                return []
            data = json.loads(raw)
        except Exception:
            logger.exception("cart.store.get_items failed key=%s", self.key)
            return []
        if not isinstance(data, list):
            logger.warning("cart.store.get_items ignored non-list payload key=%s", self.key)
            return []
        return parse_items(data)

    def save_items(self, items: List[CartItem]) -> None:
        self.storage.set_item(self.key, json.dumps(dump_items(items)))

    def clear_items(self) -> None:
        self.storage.remove_item(self.key)
