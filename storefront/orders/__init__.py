"""
Module 'orders' (feature-first): modèles de commande et dépôt Supabase.
"""

from .models import (
    Customer,
    OrderDraft,
    OrderProduct,
    PaymentMethod,
    PaymentStatus,
    Verification,
    compose_address,
    generate_order_reference,
    make_idempotency_key,
    build_order_draft,
)
from .repository import OrderRepository, OrderResult, OrderListResult, OrderAuthRequirement

__all__ = [
    "Customer",
    "OrderDraft",
    "OrderProduct",
    "PaymentMethod",
    "PaymentStatus",
    "Verification",
    "compose_address",
    "generate_order_reference",
    "make_idempotency_key",
    "build_order_draft",
    "OrderRepository",
    "OrderResult",
    "OrderListResult",
    "OrderAuthRequirement",
]
