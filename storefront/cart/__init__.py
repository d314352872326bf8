"""
Module 'cart' (feature-first): point d'entrée public.
Réunit le modèle panier, le stockage local, le miroir distant et la sélection du support.
"""

from .models import (
    CartItem,
    parse_items,
    dump_items,
    increment_quantity,
    decrement_quantity,
    remove_item,
    cart_total,
    merge_carts,
)
from .store import CartStore
from .mirror import RemoteCartMirror, CartSyncResult
from .backends import (
    CartBackend,
    LocalCartBackend,
    MirroredCartBackend,
    select_cart_backend,
    sync_cart_on_login,
)

__all__ = [
    # models
    "CartItem",
    "parse_items",
    "dump_items",
    "increment_quantity",
    "decrement_quantity",
    "remove_item",
    "cart_total",
    "merge_carts",
    # stockage
    "CartStore",
    "RemoteCartMirror",
    "CartSyncResult",
    # backends
    "CartBackend",
    "LocalCartBackend",
    "MirroredCartBackend",
    "select_cart_backend",
    "sync_cart_on_login",
]
