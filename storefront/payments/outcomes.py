"""
Issue d'une fenêtre de paiement hébergée: un seul résultat par ouverture.
"""
from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Completed:
    payment_id: str
    gateway_order_id: str
    signature: str


@dataclass(frozen=True)
class Cancelled:
    pass


@dataclass(frozen=True)
class Failed:
    reason: str


@dataclass(frozen=True)
class Abandoned:
    """Fenêtre fermée sans événement terminal (après le délai de grâce)."""


PaymentOutcome = Union[Completed, Cancelled, Failed, Abandoned]
