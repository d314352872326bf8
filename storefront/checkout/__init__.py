"""
Module 'checkout': tunnel de commande en trois étapes et ses collaborateurs.
"""

from .context import CheckoutContext, build_checkout_context, build_http_client
from .orchestrator import CheckoutOrchestrator, CheckoutStep
from .validation import AddressValidationError, validate_address_form, customer_from_form
from .view import CheckoutView, RecordingView

__all__ = [
    "CheckoutContext",
    "build_checkout_context",
    "build_http_client",
    "CheckoutOrchestrator",
    "CheckoutStep",
    "AddressValidationError",
    "validate_address_form",
    "customer_from_form",
    "CheckoutView",
    "RecordingView",
]
