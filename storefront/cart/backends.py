"""
Sélection du support de panier selon la présence d'une session.

- LocalCartBackend: visiteur anonyme, stockage local uniquement.
- MirroredCartBackend: session ouverte; lecture distante d'abord puis repli local,
  écriture locale puis distante (best-effort). Après un échec d'écriture distante,
  le panier local fait foi et est renvoyé au miroir à chaque lecture jusqu'à réussite.
- sync_cart_on_login: fusionne le panier local dans le panier distant à la connexion.

Les appels distants (client Supabase synchrone) passent par asyncio.to_thread.
"""
import asyncio
import logging
from typing import List, Optional, Protocol

from storefront.auth.session import Session
from .models import CartItem, merge_carts
from .mirror import RemoteCartMirror
from .store import CartStore

logger = logging.getLogger(__name__)


class CartBackend(Protocol):
    async def get_items(self) -> List[CartItem]: ...
    async def save_items(self, items: List[CartItem]) -> None: ...
    async def clear(self) -> None: ...


class LocalCartBackend:
    def __init__(self, store: CartStore):
        self.store = store

    async def get_items(self) -> List[CartItem]:
        return self.store.get_items()

    async def save_items(self, items: List[CartItem]) -> None:
        self.store.save_items(items)

    async def clear(self) -> None:
        self.store.clear_items()


class MirroredCartBackend:
    def __init__(self, store: CartStore, mirror: RemoteCartMirror):
        self.store = store
        self.mirror = mirror
        # Dernière écriture distante en échec: le panier local fait foi jusqu'à la prochaine réussite
        self.remote_stale = False

    async def _push_local(self) -> List[CartItem]:
        items = self.store.get_items()
        result = await asyncio.to_thread(self.mirror.save_cart, items)
        if result.success:
            self.remote_stale = False
        else:
            logger.warning("cart.backends remote still unavailable, using local cart: %s", result.error)
        return items

    async def get_items(self) -> List[CartItem]:
        if self.remote_stale:
            return await self._push_local()
        result = await asyncio.to_thread(self.mirror.load_cart)
        if result.success and result.items:
            return result.items
        if not result.success:
            logger.warning("cart.backends remote load failed, using local cart: %s", result.error)
        return self.store.get_items()

    async def save_items(self, items: List[CartItem]) -> None:
        self.store.save_items(items)
        result = await asyncio.to_thread(self.mirror.save_cart, items)
        self.remote_stale = not result.success
        if not result.success:
            logger.warning("cart.backends remote save failed: %s", result.error)

    async def clear(self) -> None:
        # Vidage idempotent des deux supports; l'échec distant n'empêche pas le vidage local
        self.store.clear_items()
        result = await asyncio.to_thread(self.mirror.clear_cart)
        self.remote_stale = not result.success
        if not result.success:
            logger.warning("cart.backends remote clear failed: %s", result.error)


def select_cart_backend(store: CartStore, session: Optional[Session]) -> CartBackend:
    if session is None:
        return LocalCartBackend(store)
    return MirroredCartBackend(store, RemoteCartMirror(session))


async def sync_cart_on_login(store: CartStore, mirror: RemoteCartMirror) -> List[CartItem]:
    """
    À la connexion:
    - panier local vide: rien à fusionner, on renvoie le panier distant
    - sinon fusion (local prioritaire), sauvegarde distante puis vidage local
    - échec distant: on garde le panier local tel quel
    """
    local = store.get_items()
    loaded = await asyncio.to_thread(mirror.load_cart)
    if not loaded.success:
        logger.warning("cart.backends.sync_cart_on_login remote load failed: %s", loaded.error)
        return local
    if not local:
        return loaded.items

    merged = merge_carts(local, loaded.items)
    saved = await asyncio.to_thread(mirror.save_cart, merged)
    if not saved.success:
        logger.warning("cart.backends.sync_cart_on_login remote save failed: %s", saved.error)
        return local
    store.clear_items()
    logger.info("cart.backends.sync_cart_on_login merged local=%d remote=%d -> %d", len(local), len(loaded.items), len(merged))
    return merged
