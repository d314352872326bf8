"""
Modèles de commande.

- Customer: adresse saisie à l'étape 2, `address` recomposée si absente.
- OrderDraft: instantané du panier + client + mode de paiement.
  Le total est toujours recalculé depuis les lignes, jamais repris de l'appelant.
- Forme JSON (API, emails) en camelCase; attributs Python en snake_case.
"""
import hashlib
import json
import secrets
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator

from storefront.config import ORDER_REFERENCE_PREFIX, IDEMPOTENCY_WINDOW_SECONDS
from storefront.cart.models import CartItem


class PaymentMethod(str, Enum):
    CASH_ON_DELIVERY = "Cash on Delivery"
    ONLINE_GATEWAY = "Razorpay"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class Verification(str, Enum):
    VERIFIED = "verified"
    UNVERIFIED = "unverified"


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)


class Customer(_CamelModel):
    first_name: str = Field(alias="firstName")
    last_name: str = Field(alias="lastName")
    email: EmailStr
    phone: str
    house_number: str = Field(default="", alias="houseNumber")
    road_name: str = Field(default="", alias="roadName")
    city: str = ""
    state: str = ""
    pin_code: str = Field(default="", alias="pinCode")
    address: str = ""

    @model_validator(mode="after")
    def _compose_address(self):
        if not self.address:
            self.address = compose_address(self.house_number, self.road_name, self.city, self.state, self.pin_code)
        return self

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class OrderProduct(_CamelModel):
    id: str
    name: str = ""
    price: float = Field(default=0.0, ge=0)
    quantity: int = Field(default=1, ge=1)
    image: str = ""
    total: float = 0.0

    @model_validator(mode="after")
    def _line_total(self):
        self.total = round(self.price * self.quantity, 2)
        return self


class OrderDraft(_CamelModel):
    customer: Customer
    payment_method: PaymentMethod = Field(default=PaymentMethod.CASH_ON_DELIVERY, alias="paymentMethod")
    products: List[OrderProduct] = Field(min_length=1)
    order_total: float = Field(default=0.0, alias="orderTotal")
    order_reference: str = Field(alias="orderReference")
    order_date: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat(), alias="orderDate")
    notes: str = ""
    payment_status: Optional[PaymentStatus] = Field(default=None, alias="paymentStatus")
    payment_id: Optional[str] = Field(default=None, alias="paymentId")
    payment_signature: Optional[str] = Field(default=None, alias="paymentSignature")
    gateway_order_id: Optional[str] = Field(default=None, alias="gatewayOrderId")
    order_id: Optional[str] = Field(default=None, alias="orderId")
    idempotency_key: Optional[str] = Field(default=None, alias="idempotencyKey")
    verification: Optional[Verification] = None

    @model_validator(mode="after")
    def _recompute_total(self):
        self.order_total = round(sum(p.total for p in self.products), 2)
        return self

    def to_wire(self) -> Dict[str, Any]:
        """Forme JSON camelCase (endpoints, emails)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_record(self) -> Dict[str, Any]:
        """Ligne 'orders' (snake_case); order_id est attribué par la base."""
        return self.model_dump(mode="json", exclude={"order_id"}, exclude_none=True)


def compose_address(house: str, road: str, city: str, state: str, pin: str) -> str:
    return f"{house}, {road}, {city}, {state} - {pin}"


def generate_order_reference(prefix: str = ORDER_REFERENCE_PREFIX, now_ms: Optional[int] = None) -> str:
    """
    Référence lisible: <PREFIX>-<6 derniers chiffres du timestamp ms>-<4 chiffres aléatoires>.
    Non garantie unique: la déduplication repose sur la clé d'idempotence.
    """
    ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{prefix}-{str(ms)[-6:]}-{secrets.randbelow(10000):04d}"


def new_checkout_nonce() -> str:
    return secrets.token_hex(8)


def make_idempotency_key(
    user_id: str,
    items: Iterable[CartItem],
    payment_method: str,
    now: Optional[float] = None,
    window_seconds: int = IDEMPOTENCY_WINDOW_SECONDS,
    *,
    customer: Optional[Customer] = None,
    notes: str = "",
    nonce: str = "",
) -> str:
    """
    Clé d'une tentative de commande: même tunnel (nonce), même client et adresse,
    même panier, mêmes notes et même mode de paiement dans la même fenêtre => même clé.
    Le nonce est renouvelé après chaque confirmation: une nouvelle commande a une nouvelle clé.
    """
    canonical = json.dumps(
        {
            "items": sorted([it.id, it.quantity, round(it.price, 2)] for it in items),
            "customer": customer.model_dump(mode="json") if customer is not None else None,
            "notes": (notes or "").strip(),
        },
        separators=(",", ":"),
        sort_keys=True,
    )
    bucket = int((now if now is not None else time.time()) // max(window_seconds, 1))
    raw = f"{user_id}|{nonce}|{payment_method}|{canonical}|{bucket}"
    return hashlib.sha256(raw.encode("utf-8")).hexdigest()


def build_order_draft(
    *,
    items: List[CartItem],
    customer: Customer,
    payment_method: PaymentMethod,
    notes: str = "",
    user_id: str = "",
    nonce: str = "",
) -> OrderDraft:
    """Instantané du panier: les lignes sont copiées, le total recalculé."""
    method = PaymentMethod(payment_method)
    products = [OrderProduct(**it.model_dump()) for it in items]
    return OrderDraft(
        customer=customer.model_copy(deep=True),
        payment_method=method,
        products=products,
        order_reference=generate_order_reference(),
        notes=notes or "",
        idempotency_key=(
            make_idempotency_key(user_id, items, method.value, customer=customer, notes=notes, nonce=nonce)
            if user_id
            else None
        ),
    )
