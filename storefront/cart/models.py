"""
Modèle panier et opérations de quantité.

Un article du panier est identifié par son id produit; la quantité ne descend
jamais sous 1 (décrémenter à 1 ne fait rien, seul remove_item retire la ligne).
"""
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CartItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = ""
    price: float = Field(default=0.0, ge=0)
    quantity: int = Field(default=1, ge=1)
    image: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v: Any) -> str:
        s = str(v if v is not None else "").strip()
        if not s:
            raise ValueError("id produit requis")
        return s

    @property
    def total(self) -> float:
        return round(self.price * self.quantity, 2)


def parse_items(raw: Optional[Iterable[Any]]) -> List[CartItem]:
    """Convertit une liste brute (JSON) en CartItem; les entrées invalides sont ignorées."""
    items: List[CartItem] = []
    for entry in raw or []:
        if isinstance(entry, CartItem):
            items.append(entry)
            continue
        if not isinstance(entry, dict):
            continue
        try:
            items.append(CartItem.model_validate(entry))
        except ValueError:
            continue
    return items


def dump_items(items: Iterable[CartItem]) -> List[Dict[str, Any]]:
    return [it.model_dump() for it in items]


def _replace(items: List[CartItem], item_id: str, quantity: int) -> List[CartItem]:
    return [
        it.model_copy(update={"quantity": quantity}) if it.id == item_id else it
        for it in items
    ]


def increment_quantity(items: List[CartItem], item_id: str) -> List[CartItem]:
    for it in items:
        if it.id == item_id:
            return _replace(items, item_id, it.quantity + 1)
    return list(items)


def decrement_quantity(items: List[CartItem], item_id: str) -> List[CartItem]:
    for it in items:
        if it.id == item_id:
            if it.quantity <= 1:
                return list(items)
            return _replace(items, item_id, it.quantity - 1)
    return list(items)


def remove_item(items: List[CartItem], item_id: str) -> List[CartItem]:
    return [it for it in items if it.id != item_id]


def cart_total(items: Iterable[CartItem]) -> float:
    return round(sum(it.price * it.quantity for it in items), 2)


def merge_carts(local: List[CartItem], remote: List[CartItem]) -> List[CartItem]:
    """
    Fusion à la connexion: les articles locaux d'abord, puis les articles distants
    absents du local. En cas de collision d'id, la version locale l'emporte.
    """
    merged: List[CartItem] = []
    seen = set()
    for it in list(local) + list(remote):
        if it.id in seen:
            continue
        seen.add(it.id)
        merged.append(it)
    return merged
