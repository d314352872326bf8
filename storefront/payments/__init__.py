"""
Module 'payments' (feature-first): point d'entrée public.
Réunit le client Razorpay (serveur), la vérification de signature, les cas d'usage
serveur et l'adaptateur utilisé par le tunnel de commande.
"""

from .gateway_client import GatewayError, create_gateway_order, to_minor_units
from .signature import compute_signature, verify_signature
from .service import create_payment_intent, verify_payment
from .outcomes import Abandoned, Cancelled, Completed, Failed, PaymentOutcome
from .adapter import (
    HostedCheckout,
    PaymentGatewayAdapter,
    PaymentGatewayError,
    PaymentIntent,
    PaymentTimeout,
    VerificationResult,
)

__all__ = [
    # serveur
    "GatewayError",
    "create_gateway_order",
    "to_minor_units",
    "compute_signature",
    "verify_signature",
    "create_payment_intent",
    "verify_payment",
    # issues de paiement
    "Abandoned",
    "Cancelled",
    "Completed",
    "Failed",
    "PaymentOutcome",
    # tunnel
    "HostedCheckout",
    "PaymentGatewayAdapter",
    "PaymentGatewayError",
    "PaymentIntent",
    "PaymentTimeout",
    "VerificationResult",
]
